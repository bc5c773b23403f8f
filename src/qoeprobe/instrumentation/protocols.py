# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Boundary between the run orchestrator and the browser automation layer."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from qoeprobe.network.models import RawNetworkEvent

NetworkEventSink = Callable[["RawNetworkEvent"], None]


@runtime_checkable
class PageSessionProtocol(Protocol):
    """One isolated page owned by exactly one run."""

    async def start_capture(self, sink: NetworkEventSink) -> None:
        """Begin delivering network lifecycle events to ``sink`` in arrival order."""
        ...

    async def load(self, url: str, timeout: float) -> int | None:
        """Navigate to ``url`` and return the document's HTTP status, if known.

        Raises:
            TargetUnavailable: If navigation fails or times out
        """
        ...

    async def wait_for_player(self, timeout: float) -> bool:
        """Wait for the in-page player object. False if it never appeared."""
        ...

    async def seek_to_middle(self, timeout: float) -> bool:
        """Seek the player to duration / 2 and resume playback.

        Returns False when the player reported no usable duration.
        """
        ...

    async def close(self) -> None:
        """Stop capture and release the page and its context. Idempotent."""
        ...


@runtime_checkable
class BrowserInstrumentationProtocol(Protocol):
    """Factory of page sessions backed by a (possibly shared) browser."""

    async def open_session(self) -> PageSessionProtocol: ...

    async def aclose(self) -> None: ...
