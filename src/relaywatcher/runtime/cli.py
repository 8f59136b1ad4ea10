# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT
"""Command line entry point.

Usage:
    relay-watcher                       # settings from RELAY_WATCHER_* / .env
    relay-watcher --config watcher.yaml
    relay-watcher --once                # single sync + codegen, no watching
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

import yaml
from pydantic import ValidationError

from relaywatcher import __version__
from relaywatcher.enums.enum_log_level import EnumLogLevel
from relaywatcher.runtime.application import run_application
from relaywatcher.runtime.config import RelayWatcherSettings
from relaywatcher.runtime.logging_config import configure_logging

EXIT_CONFIG_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="relay-watcher",
        description=(
            "Keep the GraphQL schema snapshot and generated code current "
            "while source trees change."
        ),
    )
    parser.add_argument(
        "--config",
        default=None,
        help="YAML settings file (values override RELAY_WATCHER_* variables)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=[level.value for level in EnumLogLevel],
        type=str.upper,
        help="Override the configured log level",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Sync the schema and run codegen once, then exit",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    return parser


def load_settings(config_path: str | None) -> RelayWatcherSettings:
    if config_path:
        return RelayWatcherSettings.from_yaml(config_path)
    return RelayWatcherSettings()


def main(argv: list[str] | None = None) -> None:
    """Parse arguments, configure logging and run until shutdown."""
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings(args.config)
    except (ValidationError, FileNotFoundError, ValueError, yaml.YAMLError) as exc:
        print(f"relay-watcher: invalid configuration: {exc}", file=sys.stderr)
        sys.exit(EXIT_CONFIG_ERROR)

    configure_logging(args.log_level or settings.log_level)
    logging.getLogger("relaywatcher").debug("Settings: %s", settings)

    sys.exit(asyncio.run(run_application(settings, once=args.once)))


__all__ = ["EXIT_CONFIG_ERROR", "build_parser", "load_settings", "main"]


if __name__ == "__main__":
    main()
