# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT
"""
relay-watcher runtime configuration.

Configuration Priority (highest to lowest):
    1. Values passed to the constructor (including a YAML file via ``from_yaml``)
    2. Environment variables prefixed ``RELAY_WATCHER_``
    3. ``.env`` file in the working directory
    4. Default values

List-valued fields (expressions, commands) are read from the environment as
JSON, e.g. ``RELAY_WATCHER_CODEGEN_COMMAND='["yarn", "run", "relay"]'``.

Example:
    # Load from environment
    settings = RelayWatcherSettings()

    # Load from YAML, with ${VAR} interpolation
    settings = RelayWatcherSettings.from_yaml("relay-watcher.yaml")
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from relaywatcher.constants import (
    DEFAULT_CODEGEN_FOOTER_LINES,
    DEFAULT_CODEGEN_HEADER_LINES,
    DEFAULT_REQUIRED_CAPABILITIES,
    DEFAULT_SUBSCRIPTION_FIELDS,
)
from relaywatcher.enums.enum_log_level import EnumLogLevel

_ENV_REF_PATTERN = re.compile(
    r"\$\{(?P<name>[A-Z_][A-Z0-9_]*)(?::-(?P<fallback>[^}]*))?\}"
)


class RelayWatcherSettings(BaseSettings):
    """Settings for the schema/codegen coordinator.

    Relative paths are resolved against ``project_root``.
    """

    model_config = SettingsConfigDict(
        env_prefix="RELAY_WATCHER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Schema sync
    # ------------------------------------------------------------------

    graphql_url: str = Field(
        default="https://graphql.buildkite.com/v1",
        description="GraphQL endpoint queried for the introspection document",
    )
    graphql_token: SecretStr = Field(
        ..., description="Bearer token sent with the introspection request"
    )
    schema_path: Path = Field(
        default=Path("app/graph/schema.json"),
        description="Where the schema snapshot is written",
    )
    http_timeout_seconds: float = Field(
        default=30.0, gt=0, description="Timeout for the introspection request"
    )

    # ------------------------------------------------------------------
    # Watched trees
    # ------------------------------------------------------------------

    project_root: Path = Field(
        default_factory=Path.cwd,
        description="Base directory for relative paths",
    )
    schema_source_dir: Path = Field(
        default=Path("../buildkite/app/graph"),
        description="Tree whose changes trigger schema sync followed by codegen",
    )
    frontend_source_dir: Path = Field(
        default=Path("app"),
        description="Tree whose changes trigger codegen only",
    )
    schema_source_expression: list[Any] = Field(
        default_factory=lambda: ["allof", ["type", "f"], ["suffix", "rb"]],
        description="watchman expression for the schema-source subscription",
    )
    frontend_source_expression: list[Any] = Field(
        default_factory=lambda: [
            "allof",
            ["type", "f"],
            ["suffix", "js"],
            ["not", ["match", "**/__generated__/**", "wholename"]],
        ],
        description="watchman expression for the frontend-source subscription",
    )
    subscription_fields: list[str] = Field(
        default_factory=lambda: list(DEFAULT_SUBSCRIPTION_FIELDS),
        description="File fields requested in each change batch",
    )

    # ------------------------------------------------------------------
    # watchman
    # ------------------------------------------------------------------

    required_capabilities: list[str] = Field(
        default_factory=lambda: list(DEFAULT_REQUIRED_CAPABILITIES),
        description="Capabilities that must be supported by watchman",
    )
    watchman_binary: str = Field(
        default="watchman", description="watchman executable used for get-sockname"
    )
    watchman_sockname: str | None = Field(
        default=None,
        description="Socket path; discovered via get-sockname when unset",
    )
    watchman_command_timeout_seconds: float = Field(default=30.0, gt=0)

    # ------------------------------------------------------------------
    # Codegen
    # ------------------------------------------------------------------

    codegen_command: list[str] = Field(
        default_factory=lambda: ["yarn", "run", "relay"],
        min_length=1,
        description="Compiler command, run from project_root",
    )
    codegen_header_lines: int = Field(default=DEFAULT_CODEGEN_HEADER_LINES, ge=0)
    codegen_footer_lines: int = Field(default=DEFAULT_CODEGEN_FOOTER_LINES, ge=0)

    # ------------------------------------------------------------------
    # Behaviour
    # ------------------------------------------------------------------

    serialize_pipeline_runs: bool = Field(
        default=True,
        description="Queue overlapping pipeline runs instead of interleaving them",
    )
    skip_initial_sync: bool = Field(
        default=False,
        description="Do not run schema sync and codegen once at startup",
    )
    log_level: EnumLogLevel = Field(default=EnumLogLevel.INFO)

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.upper()
        return value

    def resolve(self, path: Path) -> Path:
        """Return ``path`` as an absolute path anchored at ``project_root``."""
        if path.is_absolute():
            return path
        return (self.project_root / path).resolve()

    @classmethod
    def from_yaml(
        cls,
        path: str | Path,
        *,
        interpolate_env: bool = True,
    ) -> RelayWatcherSettings:
        """
        Load settings from a YAML file; environment variables fill the gaps.

        String values may reference ``${VAR}`` or ``${VAR:-fallback}``.

        Raises:
            FileNotFoundError: If the file does not exist.
            yaml.YAMLError: If YAML parsing fails.
            ValueError: If the file is not a mapping or references an unset
                variable without a fallback.
            pydantic.ValidationError: If validation fails.
        """
        path = Path(path)
        if not path.is_file():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Configuration file must contain a mapping: {path}")

        if interpolate_env:
            data = expand_env_refs(data, source=path)
        return cls(**data)


def expand_env_refs(value: Any, *, source: Path | None = None) -> Any:
    """Substitute ``${VAR}`` / ``${VAR:-fallback}`` in every string of ``value``.

    Mappings and lists are walked recursively; other scalars pass through.

    Raises:
        ValueError: If a variable without a fallback is not set.
    """
    if isinstance(value, dict):
        return {
            key: expand_env_refs(item, source=source) for key, item in value.items()
        }
    if isinstance(value, list):
        return [expand_env_refs(item, source=source) for item in value]
    if not isinstance(value, str):
        return value

    def _substitute(match: re.Match[str]) -> str:
        name, fallback = match.group("name"), match.group("fallback")
        resolved = os.environ.get(name, fallback)
        if resolved is None:
            where = f" in {source}" if source is not None else ""
            raise ValueError(f"Environment variable '{name}' is not set{where}")
        return resolved

    return _ENV_REF_PATTERN.sub(_substitute, value)


__all__ = ["RelayWatcherSettings", "expand_env_refs"]
