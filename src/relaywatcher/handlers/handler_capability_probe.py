# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT
"""Capability probe for the watchman service.

Every downstream component assumes the required capabilities are present,
so any failure here is fatal.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from relaywatcher.errors import (
    CapabilityCheckError,
    WatchmanCommandError,
    WatchmanConnectionError,
)
from relaywatcher.models.model_service_info import ModelServiceInfo
from relaywatcher.protocols import ProtocolWatchmanClient


class CapabilityProbe:
    """Verifies watchman supports a required feature set."""

    def __init__(
        self,
        client: ProtocolWatchmanClient,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self._client = client
        self._logger = logger or logging.getLogger(__name__)

    async def check(self, required_features: Sequence[str]) -> ModelServiceInfo:
        """Run ``version`` with required capabilities.

        Args:
            required_features: Capability names that must be supported.

        Returns:
            Server version and reported capabilities.

        Raises:
            CapabilityCheckError: On transport/protocol failure or when any
                required capability is reported absent.
        """
        required = list(required_features)
        try:
            response = await self._client.command(
                "version", {"required": required, "optional": []}
            )
        except (WatchmanCommandError, WatchmanConnectionError) as exc:
            raise CapabilityCheckError(f"Capability check failed: {exc}") from exc

        capabilities = response.get("capabilities") or {}
        missing = [name for name in required if not capabilities.get(name, False)]
        if missing:
            raise CapabilityCheckError(
                f"watchman is missing required capabilities: {', '.join(missing)}"
            )

        info = ModelServiceInfo(
            version=str(response.get("version", "unknown")),
            capabilities={str(k): bool(v) for k, v in capabilities.items()},
        )
        self._logger.info(
            "watchman %s supports required capabilities: %s",
            info.version,
            ", ".join(required) or "(none)",
        )
        return info


__all__ = ["CapabilityProbe"]
