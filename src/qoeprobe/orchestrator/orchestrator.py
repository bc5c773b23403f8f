# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""State machine that drives a single playback run."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from qoeprobe.common.enums import (
    DegradedCondition,
    RequestStatus,
    RunOutcome,
    RunState,
)
from qoeprobe.common.environment import Environment
from qoeprobe.common.exceptions import (
    InstrumentationFailure,
    PlayerNotReady,
    PlaylistNotLoaded,
    ServerError,
    TargetUnavailable,
)
from qoeprobe.common.mixins import QoEProbeLoggerMixin
from qoeprobe.instrumentation.protocols import (
    BrowserInstrumentationProtocol,
    PageSessionProtocol,
)
from qoeprobe.network.aggregator import RunAggregate
from qoeprobe.network.classifier import NetworkEventClassifier
from qoeprobe.network.models import RawNetworkEvent
from qoeprobe.orchestrator.models import (
    RunConfig,
    RunMetrics,
    RunResult,
    TestPhases,
    parse_test_spec,
    utc_now_iso,
)

if TYPE_CHECKING:
    from qoeprobe.reporting.live_reporter import LiveReporter

__all__ = [
    "RunOrchestrator",
]


class RunOrchestrator(QoEProbeLoggerMixin):
    """Drives one playback run from page load to its final report.

    STARTING -> PAGE_LOADING -> AWAITING_PLAYER -> AWAITING_PLAYLIST -> PHASE_ONE
    -> [SEEKING -> PHASE_TWO] -> FINALIZING -> FINISHED | ERROR | SERVER_ERROR |
    PLAYER_NOT_READY

    Network events from the page are queued as they arrive and consumed by one
    dispatcher task, so the classifier and the aggregate only ever see one event
    at a time. The page session is closed and the dispatcher drained before the
    summary is computed.

    An instance runs exactly once.
    """

    def __init__(
        self,
        config: RunConfig,
        instrumentation: BrowserInstrumentationProtocol,
        reporter: LiveReporter,
        *,
        slow_threshold_mbps: float | None = None,
        page_load_timeout: float | None = None,
        player_ready_timeout: float | None = None,
        playlist_ready_timeout: float | None = None,
        seek_player_timeout: float | None = None,
        top_n: int | None = None,
        clock: Callable[[], float] = time.perf_counter,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        super().__init__()
        settings = Environment.RUNNER
        self.config = config
        self.instrumentation = instrumentation
        self.reporter = reporter
        self.slow_threshold_mbps = (
            settings.SLOW_THRESHOLD_MBPS
            if slow_threshold_mbps is None
            else slow_threshold_mbps
        )
        self.page_load_timeout = (
            settings.PAGE_LOAD_TIMEOUT if page_load_timeout is None else page_load_timeout
        )
        self.player_ready_timeout = (
            settings.PLAYER_READY_TIMEOUT
            if player_ready_timeout is None
            else player_ready_timeout
        )
        self.playlist_ready_timeout = (
            settings.PLAYLIST_READY_TIMEOUT
            if playlist_ready_timeout is None
            else playlist_ready_timeout
        )
        self.seek_player_timeout = (
            settings.SEEK_PLAYER_TIMEOUT
            if seek_player_timeout is None
            else seek_player_timeout
        )
        self.top_n = settings.TOP_N if top_n is None else top_n
        self._clock = clock
        self._sleep = sleep

        self.state = RunState.STARTING
        self._started = False
        self._metrics = RunMetrics.for_run(config)
        self._aggregate: RunAggregate | None = None
        self._classifier = NetworkEventClassifier(self.slow_threshold_mbps)
        self._events: asyncio.Queue[RawNetworkEvent | None] = asyncio.Queue()
        self._dispatcher: asyncio.Task | None = None
        self._session: PageSessionProtocol | None = None
        self._session_released = False
        self._playlist_seen = asyncio.Event()

    def _transition(self, state: RunState) -> None:
        self.debug(f"Run state {self.state} -> {state}")
        self.state = state

    def _degrade(self, condition: DegradedCondition) -> None:
        if condition not in self._metrics.degraded:
            self._metrics.degraded.append(condition)

    async def run(self) -> RunResult:
        """Execute the run and report its result.

        Raises:
            InvalidTestSpec: Before any browser resource is touched
            RuntimeError: If this instance was already run
        """
        if self._started:
            raise RuntimeError("RunOrchestrator instances run exactly once")
        self._started = True

        self._transition(RunState.STARTING)
        phases = parse_test_spec(self.config.test)
        self.info(
            f"Starting run {self.config.title or self.config.url!r}: {phases.describe()}"
        )
        self._aggregate = RunAggregate(clock=self._clock)

        outcome = RunOutcome.ERROR
        try:
            try:
                await self._execute(phases)
                outcome = RunOutcome.FINISHED
            except ServerError as e:
                outcome = RunOutcome.SERVER_ERROR
                self._metrics.error = str(e)
                self.error(f"Target server error during {self.state}: {e}")
            except PlayerNotReady as e:
                outcome = RunOutcome.PLAYER_NOT_READY
                self._metrics.error = str(e)
                self.error(str(e))
            except Exception as e:
                outcome = RunOutcome.ERROR
                self._metrics.error = str(e)
                self.exception(f"Run failed during {self.state}: {e!r}")
        finally:
            await self._release_session()

        return await self._finalize(outcome)

    async def _execute(self, phases: TestPhases) -> None:
        self._transition(RunState.PAGE_LOADING)
        self._session = await self.instrumentation.open_session()
        # Capture starts before navigation so time-to-first-playlist is measurable.
        await self._session.start_capture(self._events.put_nowait)
        self._dispatcher = asyncio.create_task(
            self._dispatch_events(), name="qoeprobe-run-dispatcher"
        )
        await self._load_page()

        self._transition(RunState.AWAITING_PLAYER)
        await self._await_player()

        self._transition(RunState.AWAITING_PLAYLIST)
        await self._await_playlist()

        self._transition(RunState.PHASE_ONE)
        if phases.first_phase_seconds > 0:
            await self._sleep(phases.first_phase_seconds)

        if phases.has_rewind:
            self._transition(RunState.SEEKING)
            await self._seek()
            self._transition(RunState.PHASE_TWO)
            if phases.second_phase_seconds > 0:
                await self._sleep(phases.second_phase_seconds)

    async def _load_page(self) -> None:
        url = self.config.url
        try:
            status = await asyncio.wait_for(
                self._session.load(url, self.page_load_timeout),
                timeout=self.page_load_timeout,
            )
        except TimeoutError as e:
            raise TargetUnavailable(
                f"Page did not load within {self.page_load_timeout}s: {url}"
            ) from e
        if status is None:
            return
        if status >= 500:
            raise ServerError(status, url)
        if status >= 400:
            raise TargetUnavailable(f"Target responded with HTTP {status}: {url}")

    async def _await_player(self) -> None:
        try:
            ready = await asyncio.wait_for(
                self._session.wait_for_player(self.player_ready_timeout),
                timeout=self.player_ready_timeout,
            )
        except TimeoutError:
            ready = False
        if not ready:
            raise PlayerNotReady(
                f"Player not ready within {self.player_ready_timeout}s on {self.config.url}"
            )
        self.debug("Player object found")

    async def _await_playlist(self) -> None:
        try:
            await asyncio.wait_for(
                self._playlist_seen.wait(), timeout=self.playlist_ready_timeout
            )
        except TimeoutError:
            condition = PlaylistNotLoaded(
                f"No playlist within {self.playlist_ready_timeout}s, continuing"
            )
            self.warning(str(condition))
            self._degrade(DegradedCondition.PLAYLIST_NOT_LOADED)
            self.reporter.report_notice(
                {
                    "url": self.config.url,
                    "type": "playlist",
                    "status": str(DegradedCondition.PLAYLIST_NOT_LOADED),
                }
            )
            return
        self.debug("Playlist loaded")

    async def _seek(self) -> None:
        try:
            seeked = await asyncio.wait_for(
                self._session.seek_to_middle(self.seek_player_timeout),
                timeout=self.seek_player_timeout * 2,
            )
        except Exception as e:
            self.warning(f"Seek failed, playback continues unseeked: {e!r}")
            seeked = False
        if seeked:
            self.info("Seeked to the middle of the stream")
        else:
            self._degrade(DegradedCondition.SEEK_FAILED)

    async def _dispatch_events(self) -> None:
        while True:
            event = await self._events.get()
            if event is None:
                return
            try:
                self._handle_event(event)
            except Exception as e:
                failure = InstrumentationFailure(
                    f"Failed to process {event.type} for {event.request_id}: {e!r}"
                )
                self.warning(str(failure))
                self._degrade(DegradedCondition.INSTRUMENTATION_FAILURE)

    def _handle_event(self, event: RawNetworkEvent) -> None:
        observation = self._classifier.handle(event)
        if observation is None:
            return
        aggregate = self._aggregate
        had_quality = aggregate.delivered_quality is not None
        aggregate.add(observation)

        if not had_quality and aggregate.delivered_quality is not None:
            self.info(f"Delivered quality detected: {aggregate.delivered_quality}")
        if observation.status != RequestStatus.OK:
            self._metrics.record_suspicious(observation)
        if aggregate.playlist_seen:
            self._playlist_seen.set()
        self.reporter.report_observation(observation)

    async def _release_session(self) -> None:
        """Close the page and drain queued events. Runs on every exit path."""
        if self._session is not None and not self._session_released:
            self._session_released = True
            try:
                await self._session.close()
            except Exception as e:
                self.warning(f"Failed to close page session: {e!r}")
        if self._dispatcher is not None:
            self._events.put_nowait(None)
            await self._dispatcher
            self._dispatcher = None

    async def _finalize(self, outcome: RunOutcome) -> RunResult:
        self._transition(RunState.FINALIZING)
        aggregate = self._aggregate
        summary = aggregate.summarize(
            expected_quality=self.config.expected_quality, top_n=self.top_n
        )
        self._metrics.test_finish = utc_now_iso()
        self._metrics.test_status = str(outcome)
        self._metrics.requests = aggregate.total
        self._metrics.delivered_quality = aggregate.delivered_quality

        result = RunResult(outcome=outcome, summary=summary, metrics=self._metrics)
        await self.reporter.report_result(result)
        self._transition(outcome.run_state)
        self.info(
            f"Run {outcome}: {summary.requests_total} media requests, "
            f"{summary.requests_slow} slow, {summary.requests_failed} failed, "
            f"avg {summary.avg_mbps or 0:.2f} Mbps"
        )
        return result
