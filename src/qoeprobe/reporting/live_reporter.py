# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Streams a run's events to its subscriber and feeds the process metrics."""

import asyncio
from collections.abc import AsyncIterator
from typing import Any

from qoeprobe.common.mixins import QoEProbeLoggerMixin
from qoeprobe.network.models import NetworkObservation
from qoeprobe.orchestrator.models import RunResult
from qoeprobe.reporting.events import DONE_EVENT, SUMMARY_EVENT, ServerSentEvent
from qoeprobe.reporting.metrics import ProcessMetrics
from qoeprobe.reporting.summary_log import SummaryLog


class LiveReporter(QoEProbeLoggerMixin):
    """Per-run event channel.

    Events are queued immediately, in the order they are reported, and drained by
    ``stream()``. The queue is unbounded so reporting never suspends the run's
    dispatcher. A subscriber that goes away simply stops draining; the run itself
    keeps going.
    """

    def __init__(
        self, metrics: ProcessMetrics, summary_log: SummaryLog | None = None
    ) -> None:
        super().__init__()
        self.metrics = metrics
        self.summary_log = summary_log
        self._queue: asyncio.Queue[ServerSentEvent | None] = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def _publish(self, event: ServerSentEvent) -> None:
        if self._closed:
            self.warning(f"Dropping event reported after the run ended: {event.data!r}")
            return
        self._queue.put_nowait(event)

    def report_observation(self, observation: NetworkObservation) -> None:
        self.metrics.observe_request(observation)
        self._publish(ServerSentEvent(observation.to_stream_payload()))

    def report_notice(self, payload: dict[str, Any]) -> None:
        """Unnamed event that is not a request, e.g. a degraded playlist notice."""
        self._publish(ServerSentEvent(payload))

    async def report_result(self, result: RunResult) -> None:
        """Emit ``summary`` then ``done`` and end the stream. Once per run."""
        if self._closed:
            self.warning("Run result already reported; ignoring duplicate")
            return
        self.metrics.observe_run(result.outcome, result.summary)
        self._publish(
            ServerSentEvent(result.summary.model_dump(mode="json"), SUMMARY_EVENT)
        )
        self._publish(
            ServerSentEvent(result.metrics.model_dump(mode="json"), DONE_EVENT)
        )
        self._closed = True
        self._queue.put_nowait(None)
        if self.summary_log is not None:
            try:
                await asyncio.to_thread(self.summary_log.append, result)
            except OSError as e:
                self.error(f"Failed to append run summary to {self.summary_log.path}: {e!r}")

    async def events(self) -> AsyncIterator[ServerSentEvent]:
        """Yield events in report order until the ``done`` event has been sent."""
        while True:
            event = await self._queue.get()
            if event is None:
                return
            yield event

    async def stream(self) -> AsyncIterator[bytes]:
        """Encoded form of ``events()`` for the HTTP response body."""
        async for event in self.events():
            yield event.encode()
