# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Event loop lag sampling.

Phase timers, the live event stream and the control API all share one event
loop. A run that blocks it (for example a synchronous call slipping into an
instrumentation callback) delays every other run's timers and stream.
"""

import asyncio
import time
from collections.abc import Callable

from qoeprobe.common.constants import (
    MILLIS_PER_SECOND,
    NANOS_PER_MILLIS,
    NANOS_PER_SECOND,
)
from qoeprobe.common.environment import Environment
from qoeprobe.common.mixins import QoEProbeLoggerMixin

LagObserver = Callable[[float], None]


class EventLoopMonitor(QoEProbeLoggerMixin):
    """Sleeps on a fixed timer and measures how late each wake-up is.

    Every sample is passed to ``on_lag`` in milliseconds (never negative);
    samples above the warning threshold are logged as well.

    Settings come from ``Environment.SERVICE``: ``EVENT_LOOP_HEALTH_ENABLED``,
    ``EVENT_LOOP_HEALTH_INTERVAL`` (seconds) and
    ``EVENT_LOOP_HEALTH_WARN_THRESHOLD_MS``.
    """

    def __init__(self, service_id: str, on_lag: LagObserver | None = None) -> None:
        super().__init__()
        self.service_id = service_id
        self.on_lag = on_lag
        self._task: asyncio.Task | None = None
        self._stop_requested = False

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        self._stop_requested = False
        if self._task is None:
            self._task = asyncio.create_task(
                self._sample_forever(), name=f"{self.service_id}-loop-monitor"
            )

    def stop(self) -> None:
        if self._stop_requested:
            return
        self._stop_requested = True
        if self._task is not None:
            self._task.cancel()
        self._task = None

    async def _sample(self, interval_sec: float) -> float:
        """Sleep ``interval_sec`` and return how much longer it took, in ms."""
        started_ns = time.perf_counter_ns()
        await asyncio.sleep(interval_sec)
        elapsed_ns = time.perf_counter_ns() - started_ns
        return (elapsed_ns - round(interval_sec * NANOS_PER_SECOND)) / NANOS_PER_MILLIS

    async def _sample_forever(self) -> None:
        settings = Environment.SERVICE
        if not settings.EVENT_LOOP_HEALTH_ENABLED:
            self.debug(f"Event loop monitoring disabled for {self.service_id}")
            return

        interval_sec = settings.EVENT_LOOP_HEALTH_INTERVAL
        threshold_ms = settings.EVENT_LOOP_HEALTH_WARN_THRESHOLD_MS
        while not self._stop_requested:
            lag_ms = await self._sample(interval_sec)
            if self.is_trace_enabled:
                self.trace(f"Event loop lag for {self.service_id}: {lag_ms:.2f}ms")
            if self.on_lag is not None:
                self.on_lag(max(lag_ms, 0.0))
            if lag_ms > threshold_ms:
                self.warning(
                    f"Event loop for {self.service_id} was blocked: woke {lag_ms:,.2f}ms "
                    f"late on a {interval_sec * MILLIS_PER_SECOND:.0f}ms timer"
                )
