# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Change batches pushed by the notification service."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ModelChangedFile(BaseModel):
    """A single file entry in a change batch.

    watchman omits metadata for files that no longer exist, so everything
    except ``name`` is optional. A subscription that asks only for ``name``
    receives bare strings instead of objects; both forms are accepted.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str
    size: int | None = None
    mtime_ms: int | None = None
    exists: bool = True
    type: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _accept_bare_name(cls, data: Any) -> Any:
        if isinstance(data, str):
            return {"name": data}
        return data


class ModelChangeEventBatch(BaseModel):
    """One unilateral ``subscription`` push.

    Attributes:
        subscription_id: Name of the subscription this batch belongs to.
        files: Changed files, in the order watchman reported them.
        clock: Clock at which the batch was produced, when reported.
        is_fresh_instance: True when watchman could not compute a delta.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    subscription_id: str
    files: tuple[ModelChangedFile, ...] = Field(default_factory=tuple)
    clock: str | None = None
    is_fresh_instance: bool = False

    @classmethod
    def from_push(cls, payload: dict[str, Any]) -> ModelChangeEventBatch:
        """Build a batch from a raw watchman ``subscription`` push."""
        return cls(
            subscription_id=payload["subscription"],
            files=tuple(
                ModelChangedFile.model_validate(entry)
                for entry in payload.get("files") or ()
            ),
            clock=payload.get("clock"),
            is_fresh_instance=bool(payload.get("is_fresh_instance", False)),
        )


__all__ = ["ModelChangeEventBatch", "ModelChangedFile"]
