# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Lifecycle states of a single watchman subscription."""

from enum import StrEnum


class EnumSubscriptionState(StrEnum):
    """State machine for a subscription.

    UNESTABLISHED -> WATCH_PENDING -> WATCH_ESTABLISHED -> CLOCK_OBTAINED
    -> SUBSCRIBE_PENDING -> ACTIVE. FAILED is terminal.
    """

    UNESTABLISHED = "unestablished"
    WATCH_PENDING = "watch_pending"
    WATCH_ESTABLISHED = "watch_established"
    CLOCK_OBTAINED = "clock_obtained"
    SUBSCRIBE_PENDING = "subscribe_pending"
    ACTIVE = "active"
    FAILED = "failed"


__all__ = ["EnumSubscriptionState"]
