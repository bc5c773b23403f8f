# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Periodic poller that picks the next item and triggers a run for it."""

import asyncio
import re
import time

from qoeprobe.common.constants import DEFAULT_TEST_MINUTES, SECONDS_PER_MINUTE
from qoeprobe.common.enums import LifecycleState, RunOutcome
from qoeprobe.common.environment import Environment
from qoeprobe.common.exceptions import ContentSourceUnreachable
from qoeprobe.common.mixins import HealthCheckMixin, QoEProbeLoggerMixin
from qoeprobe.orchestrator import RunConfig
from qoeprobe.scheduler.config import (
    SchedulerConfig,
    SchedulerConfigPatch,
    SchedulerConfigStore,
)
from qoeprobe.scheduler.content_source import ContentSourceClient, build_target_url
from qoeprobe.scheduler.triggers import RunTriggerProtocol

_LEADING_INT = re.compile(r"\s*[+-]?\d+")


def run_duration_minutes(test_spec: str | None) -> int:
    """Total minutes of a test spec: the sum of its positive numbers, else 5.

    Unlike ``parse_test_spec`` this never fails; ``"5r"`` counts as 5 and
    ``"abc"`` falls back to the default.
    """
    if not test_spec:
        return DEFAULT_TEST_MINUTES
    total = 0
    for part in str(test_spec).split("r"):
        match = _LEADING_INT.match(part)
        if match and (minutes := int(match.group())) > 0:
            total += minutes
    return total or DEFAULT_TEST_MINUTES


def next_delay_seconds(test_spec: str | None, ad_gap_seconds: float) -> float:
    return run_duration_minutes(test_spec) * SECONDS_PER_MINUTE + ad_gap_seconds


class Scheduler(QoEProbeLoggerMixin, HealthCheckMixin):
    """Runs one cycle at a time, then arms a single timer for the next one.

    The delay is derived from the current test spec plus a fixed gap for
    pre-roll adverts. A config update re-arms the timer without forcing a run;
    while a cycle is in flight the cycle re-arms the timer itself when it ends.
    """

    def __init__(
        self,
        store: SchedulerConfigStore,
        content_source: ContentSourceClient,
        trigger: RunTriggerProtocol,
        *,
        ad_gap_seconds: float | None = None,
        service_id: str = "scheduler",
    ) -> None:
        super().__init__(service_id=service_id)
        self.store = store
        self.content_source = content_source
        self.trigger = trigger
        self.ad_gap_seconds = (
            Environment.SCHEDULER.AD_GAP_SECONDS
            if ad_gap_seconds is None
            else ad_gap_seconds
        )
        self._loop: asyncio.AbstractEventLoop | None = None
        self._timer: asyncio.TimerHandle | None = None
        self._cycle_task: asyncio.Task | None = None
        self.next_run_at: float | None = None

    @property
    def cycle_running(self) -> bool:
        return self._cycle_task is not None and not self._cycle_task.done()

    async def start(self, run_immediately: bool = True) -> None:
        self.state = LifecycleState.STARTING
        self._loop = asyncio.get_running_loop()
        self.state = LifecycleState.RUNNING
        self.info(f"Scheduler started with {self.store.current.model_dump(by_alias=True)}")
        if run_immediately:
            self._launch_cycle()
        else:
            self.schedule_next()

    async def stop(self) -> None:
        self.state = LifecycleState.STOPPING
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self.next_run_at = None
        task = self._cycle_task
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                self.debug("In-flight cycle cancelled")
        self.state = LifecycleState.STOPPED

    def schedule_next(self) -> float:
        """(Re)compute the delay from the current config and arm the timer."""
        delay = next_delay_seconds(self.store.current.test, self.ad_gap_seconds)
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self.cycle_running:
            self.info(f"Cycle in progress; next run {delay:.0f}s after it ends")
            return delay
        self._timer = self._loop.call_later(delay, self._launch_cycle)
        self.next_run_at = time.time() + delay
        self.info(f"Next run in {delay:.0f}s")
        return delay

    async def update_config(self, patch: SchedulerConfigPatch) -> SchedulerConfig:
        config = await self.store.update(patch)
        self.info(f"Scheduler config updated: {config.model_dump(by_alias=True)}")
        if self.state == LifecycleState.RUNNING:
            self.schedule_next()
        return config

    def _launch_cycle(self) -> None:
        self._timer = None
        self.next_run_at = None
        if self.state != LifecycleState.RUNNING:
            return
        if self.cycle_running:
            self.warning("Previous cycle still running; not starting another")
            return
        self._cycle_task = asyncio.create_task(
            self._cycle_then_reschedule(), name="qoeprobe-scheduler-cycle"
        )

    async def _cycle_then_reschedule(self) -> None:
        started = time.perf_counter()
        self.info("Scheduler cycle triggered")
        try:
            await self.run_cycle()
        except Exception as e:
            self.exception(f"Scheduler cycle failed: {e!r}")
        finally:
            self.info(f"Cycle took {time.perf_counter() - started:.0f}s")
            self._cycle_task = None
            if self.state == LifecycleState.RUNNING:
                self.schedule_next()

    async def run_cycle(self) -> RunOutcome | None:
        """Resolve a target and run it once. None when the run was skipped."""
        config = self.store.current
        try:
            item = await self.content_source.fetch(config.json_endpoint)
        except ContentSourceUnreachable as e:
            self.error(f"Skipping this cycle: {e}")
            return None

        url = item.playable_url
        if not url:
            self.error(
                f"No playable URL in content source item: {item.model_dump(exclude_none=True)}"
            )
            return None

        target_url = build_target_url(url, domain=config.domain, quality=config.quality)
        run_config = RunConfig(
            url=target_url, test=config.test, title=item.title, manual=False
        )
        self.info(f"Triggering run {item.title!r}: {target_url}")
        outcome = await self.trigger.trigger(run_config)
        self.info(f"Run ended with {outcome}")

        if outcome == RunOutcome.SERVER_ERROR:
            self.warning(f"Target server error on {target_url}; the run server restarts")
        return outcome
