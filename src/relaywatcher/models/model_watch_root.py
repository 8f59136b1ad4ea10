# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Watch root model produced by ``watch-project``."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ModelWatchRoot(BaseModel):
    """A registered watch over a directory tree.

    watchman may choose to watch an ancestor of the requested directory (for
    example the enclosing VCS root). In that case ``relative_path`` is the
    requested directory relative to ``watch`` and is used as the
    ``relative_root`` of every subscription anchored here, so file names in
    change batches come back relative to ``path``.

    Attributes:
        path: Absolute path that was requested.
        watch: Absolute path of the root watchman actually watches.
        relative_path: ``path`` relative to ``watch``; None when equal.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    path: str = Field(description="Absolute path that was requested")
    watch: str = Field(description="Watch handle (root path) returned by watchman")
    relative_path: str | None = Field(
        default=None,
        description="Requested path relative to the watch handle",
    )


__all__ = ["ModelWatchRoot"]
