# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT
"""Application wiring for the coordinator process.

Startup order:
    1. capability probe (fatal on failure)
    2. initial schema sync + codegen, once
    3. watch both trees and subscribe:
       - schema-source   -> schema sync, then codegen
       - frontend-source -> codegen only
    4. dispatch pushes until shutdown is requested

Exit statuses: 0 after a signal, 1 after a fatal service error or an
unexpected loss of the watchman connection.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging

from relaywatcher.clients.graphql_client import GraphQLIntrospectionClient
from relaywatcher.clients.watchman_client import WatchmanConnection
from relaywatcher.constants import (
    SUBSCRIPTION_FRONTEND_SOURCE,
    SUBSCRIPTION_SCHEMA_SOURCE,
)
from relaywatcher.enums.enum_pipeline import EnumPipelineTrigger
from relaywatcher.errors import FatalServiceError
from relaywatcher.handlers.handler_capability_probe import CapabilityProbe
from relaywatcher.handlers.handler_codegen_invoker import CodeGenInvoker
from relaywatcher.handlers.handler_regeneration_pipeline import RegenerationPipeline
from relaywatcher.handlers.handler_schema_synchronizer import SchemaSynchronizer
from relaywatcher.handlers.handler_subscription_coordinator import (
    SubscriptionCoordinator,
)
from relaywatcher.handlers.handler_watch_registry import ProjectWatchRegistry
from relaywatcher.models.model_subscription_spec import ModelSubscriptionSpec
from relaywatcher.protocols import ProtocolWatchmanClient
from relaywatcher.runtime.config import RelayWatcherSettings
from relaywatcher.runtime.lifecycle import ProcessLifecycle


class RelayWatcherApplication:
    """Wires the coordinator components around one watchman connection."""

    def __init__(
        self,
        settings: RelayWatcherSettings,
        *,
        client: ProtocolWatchmanClient,
        pipeline: RegenerationPipeline,
        logger: logging.Logger | None = None,
    ) -> None:
        self._settings = settings
        self._client = client
        self._logger = logger or logging.getLogger(__name__)
        self.pipeline = pipeline
        self.lifecycle = ProcessLifecycle(client, logger=self._logger)
        self.probe = CapabilityProbe(client, logger=self._logger)
        self.registry = ProjectWatchRegistry(client, logger=self._logger)
        self.coordinator = SubscriptionCoordinator(client, logger=self._logger)

    def subscription_specs(self) -> list[tuple[str, ModelSubscriptionSpec]]:
        """(absolute path, spec) for both watched trees."""
        fields = tuple(self._settings.subscription_fields)
        return [
            (
                str(self._settings.resolve(self._settings.schema_source_dir)),
                ModelSubscriptionSpec(
                    id=SUBSCRIPTION_SCHEMA_SOURCE,
                    expression=self._settings.schema_source_expression,
                    returned_fields=fields,
                ),
            ),
            (
                str(self._settings.resolve(self._settings.frontend_source_dir)),
                ModelSubscriptionSpec(
                    id=SUBSCRIPTION_FRONTEND_SOURCE,
                    expression=self._settings.frontend_source_expression,
                    returned_fields=fields,
                ),
            ),
        ]

    async def start(self) -> None:
        """Probe, run the initial pipeline, then establish subscriptions.

        Raises:
            FatalServiceError: On capability or watch failures.
        """
        await self.probe.check(self._settings.required_capabilities)

        if self._settings.skip_initial_sync:
            self._logger.info("Skipping initial schema sync and codegen")
        else:
            await self.pipeline.run_schema_and_codegen(EnumPipelineTrigger.INITIAL)

        handlers = {
            SUBSCRIPTION_SCHEMA_SOURCE: self.pipeline.on_schema_source_change,
            SUBSCRIPTION_FRONTEND_SOURCE: self.pipeline.on_frontend_source_change,
        }
        for path, spec in self.subscription_specs():
            await self.coordinator.subscribe_path(
                self.registry, path, spec, handlers[spec.id]
            )

        active = self.coordinator.active_ids
        self._logger.info(
            "Watching for changes (%d/%d subscriptions active)",
            len(active),
            len(handlers),
        )

    async def _serve(self) -> None:
        """Start up, then dispatch pushes; every ending requests shutdown."""
        try:
            await self.start()
            await self.coordinator.dispatch()
        except FatalServiceError as exc:
            self._logger.critical("Fatal: %s", exc)
            self.lifecycle.request_shutdown(str(exc), exit_code=1)
            return
        except Exception:
            self._logger.exception("Coordinator crashed")
            self.lifecycle.request_shutdown("internal error", exit_code=1)
            return

        if not self.lifecycle.shutdown_requested:
            self._logger.error("watchman connection ended unexpectedly")
            self.lifecycle.request_shutdown("connection lost", exit_code=1)

    async def run(self, *, install_signals: bool = True) -> int:
        """Run until a signal or fatal error; return the process exit status.

        A signal interrupts whatever is in progress, including the initial
        schema sync and codegen.
        """
        if install_signals:
            self.lifecycle.install_signal_handlers()

        service = asyncio.create_task(self._serve(), name="relay-watcher-service")
        try:
            await self.lifecycle.wait()
        finally:
            service.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await service
            await self.coordinator.stop()
            await self.lifecycle.close()
            if install_signals:
                self.lifecycle.remove_signal_handlers()

        return self.lifecycle.exit_code


def build_pipeline(
    settings: RelayWatcherSettings,
    graphql_client: GraphQLIntrospectionClient,
    *,
    logger: logging.Logger | None = None,
) -> RegenerationPipeline:
    """Create the schema/codegen pipeline described by ``settings``."""
    synchronizer = SchemaSynchronizer(
        graphql_client,
        settings.resolve(settings.schema_path),
        logger=logger,
    )
    codegen = CodeGenInvoker(
        settings.codegen_command,
        cwd=str(settings.project_root),
        header_lines=settings.codegen_header_lines,
        footer_lines=settings.codegen_footer_lines,
        logger=logger,
    )
    return RegenerationPipeline(
        synchronizer,
        codegen,
        serialize_runs=settings.serialize_pipeline_runs,
        logger=logger,
    )


async def run_application(
    settings: RelayWatcherSettings,
    *,
    once: bool = False,
    logger: logging.Logger | None = None,
) -> int:
    """Build the real clients and run the coordinator.

    Args:
        settings: Validated settings.
        once: Run schema sync + codegen a single time and exit, without
            connecting to watchman.
        logger: Logger injected into every component.

    Returns:
        Process exit status.
    """
    logger = logger or logging.getLogger("relaywatcher")
    async with GraphQLIntrospectionClient(
        settings.graphql_url,
        settings.graphql_token.get_secret_value(),
        timeout_seconds=settings.http_timeout_seconds,
    ) as graphql_client:
        pipeline = build_pipeline(settings, graphql_client, logger=logger)

        if once:
            ok = await pipeline.run_schema_and_codegen(EnumPipelineTrigger.INITIAL)
            return 0 if ok else 1

        client = WatchmanConnection(
            settings.watchman_sockname,
            binary=settings.watchman_binary,
            command_timeout_seconds=settings.watchman_command_timeout_seconds,
            logger=logger,
        )
        app = RelayWatcherApplication(
            settings, client=client, pipeline=pipeline, logger=logger
        )
        return await app.run()


__all__ = ["RelayWatcherApplication", "build_pipeline", "run_application"]
