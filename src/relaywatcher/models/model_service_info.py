# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Capability-check result returned by the notification service."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ModelServiceInfo(BaseModel):
    """Version and capability information reported by watchman.

    Attributes:
        version: Server version string (e.g. ``"2024.01.22.00"``).
        capabilities: Capability name to availability, as reported.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    version: str = Field(description="watchman server version")
    capabilities: dict[str, bool] = Field(
        default_factory=dict,
        description="Capabilities reported by the capability check",
    )


__all__ = ["ModelServiceInfo"]
