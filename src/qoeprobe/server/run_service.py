# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Starts runs one at a time over the shared browser instrumentation."""

import asyncio
import logging
import os
import signal
from collections.abc import Callable

from qoeprobe.common.enums import RunOutcome
from qoeprobe.common.exceptions import RunInProgress
from qoeprobe.common.mixins import QoEProbeLoggerMixin
from qoeprobe.instrumentation.protocols import BrowserInstrumentationProtocol
from qoeprobe.orchestrator import (
    RunConfig,
    RunOrchestrator,
    RunResult,
    parse_test_spec,
)
from qoeprobe.reporting import LiveReporter, ProcessMetrics, SummaryLog

OrchestratorFactory = Callable[
    [RunConfig, BrowserInstrumentationProtocol, LiveReporter], RunOrchestrator
]
RestartHook = Callable[[str], None]

logger = logging.getLogger(__name__)


def request_process_restart(reason: str) -> None:
    """Ask the process supervisor for a restart by terminating this process."""
    logger.critical(f"Requesting process restart: {reason}")
    os.kill(os.getpid(), signal.SIGTERM)


class RunService(QoEProbeLoggerMixin):
    """Owns the single active run of this process.

    ``start`` validates the config, refuses a second concurrent run and hands
    back the run's reporter together with the task executing it. The task keeps
    running even if nobody reads the reporter's stream.

    A scheduled run (``manual=False``) that ends in ``SERVER_ERROR`` calls
    ``restart_hook``: this process owns the browser, so it is the one to restart,
    whether the scheduler runs here or triggers runs over HTTP.
    """

    def __init__(
        self,
        instrumentation: BrowserInstrumentationProtocol,
        metrics: ProcessMetrics,
        summary_log: SummaryLog | None = None,
        orchestrator_factory: OrchestratorFactory = RunOrchestrator,
        restart_hook: RestartHook | None = request_process_restart,
    ) -> None:
        super().__init__()
        self.instrumentation = instrumentation
        self.metrics = metrics
        self.summary_log = summary_log
        self._orchestrator_factory = orchestrator_factory
        self.restart_hook = restart_hook
        self._active: asyncio.Task[RunResult] | None = None

    @property
    def busy(self) -> bool:
        return self._active is not None and not self._active.done()

    def start(self, config: RunConfig) -> tuple[LiveReporter, asyncio.Task[RunResult]]:
        """Start a run in the background.

        Raises:
            InvalidTestSpec: If ``config.test`` is malformed
            RunInProgress: If another run has not finished yet
        """
        parse_test_spec(config.test)
        if self.busy:
            raise RunInProgress("Another run is still in progress")

        reporter = LiveReporter(self.metrics, self.summary_log)
        orchestrator = self._orchestrator_factory(config, self.instrumentation, reporter)
        task = asyncio.create_task(
            self._execute(orchestrator, config), name="qoeprobe-run"
        )
        task.add_done_callback(self._on_run_done)
        self._active = task
        return reporter, task

    async def _execute(
        self, orchestrator: RunOrchestrator, config: RunConfig
    ) -> RunResult:
        result = await orchestrator.run()
        if (
            result.outcome == RunOutcome.SERVER_ERROR
            and not config.manual
            and self.restart_hook is not None
        ):
            self.restart_hook(f"Target server error on {config.url}")
        return result

    async def run(self, config: RunConfig) -> RunResult:
        """Start a run and wait for its result."""
        _, task = self.start(config)
        return await task

    def _on_run_done(self, task: asyncio.Task[RunResult]) -> None:
        if self._active is task:
            self._active = None
        if task.cancelled():
            self.warning("Run task was cancelled")
        elif (e := task.exception()) is not None:
            self.error(f"Run task raised: {e!r}")

    async def shutdown(self) -> None:
        """Cancel the active run, if any, and wait for it to release the page."""
        task = self._active
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            self.debug("Active run cancelled at shutdown")
