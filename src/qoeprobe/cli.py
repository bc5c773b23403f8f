# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Command line entry points: ``qoeprobe serve``, ``qoeprobe schedule``, ``qoeprobe run``."""

import asyncio
import sys
from typing import Annotated

import orjson
import uvicorn
from cyclopts import App, Parameter
from rich.console import Console

from qoeprobe import __version__
from qoeprobe.common.environment import Environment
from qoeprobe.common.exceptions import InvalidTestSpec
from qoeprobe.common.logging import setup_rich_logging
from qoeprobe.instrumentation.playwright_instrumentation import PlaywrightInstrumentation
from qoeprobe.orchestrator import RunConfig, RunResult
from qoeprobe.reporting import ProcessMetrics, SummaryLog
from qoeprobe.scheduler import (
    ContentSourceClient,
    HttpRunTrigger,
    InProcessRunTrigger,
    Scheduler,
    SchedulerConfigStore,
)
from qoeprobe.server import ProbeServer, RunService, create_app, create_control_app

app = App(name="qoeprobe", help="Browser-driven video delivery probe.", version=__version__)

LogLevel = Annotated[
    str | None,
    Parameter(name=("--log-level",), help="Root log level, e.g. TRACE, DEBUG, INFO."),
]


def _summary_log() -> SummaryLog | None:
    path = Environment.RUNNER.SUMMARY_LOG_PATH
    return SummaryLog(path) if path else None


@app.command
def serve(
    *,
    host: Annotated[str | None, Parameter(name=("--host",))] = None,
    port: Annotated[int | None, Parameter(name=("--port",))] = None,
    with_scheduler: Annotated[
        bool,
        Parameter(
            name=("--with-scheduler",),
            help="Run the scheduler and its /cronrun/config routes in this process.",
        ),
    ] = False,
    log_level: LogLevel = None,
) -> None:
    """Run the HTTP run server."""
    setup_rich_logging(log_level or Environment.SERVICE.LOG_LEVEL)

    metrics = ProcessMetrics()
    instrumentation = PlaywrightInstrumentation.from_environment()
    run_service = RunService(instrumentation, metrics, _summary_log())
    scheduler = None
    if with_scheduler:
        scheduler = Scheduler(
            SchedulerConfigStore(),
            ContentSourceClient(),
            InProcessRunTrigger(run_service),
        )
    server = ProbeServer(run_service, metrics, instrumentation, scheduler)
    uvicorn.run(
        create_app(server),
        host=host or Environment.SERVICE.HOST,
        port=port or Environment.SERVICE.PORT,
        log_config=None,
    )


@app.command
def schedule(
    *,
    host: Annotated[str | None, Parameter(name=("--host",))] = None,
    port: Annotated[
        int | None, Parameter(name=("--port",), help="Port of the control API.")
    ] = None,
    server_url: Annotated[
        str | None,
        Parameter(
            name=("--server-url",),
            help="Base URL of the run server. Defaults to localhost on SERVER_PORT.",
        ),
    ] = None,
    log_level: LogLevel = None,
) -> None:
    """Run the standalone scheduler, triggering runs on a run server over HTTP."""
    setup_rich_logging(log_level or Environment.SERVICE.LOG_LEVEL)

    store = SchedulerConfigStore()
    trigger = HttpRunTrigger(
        server_url or f"http://localhost:{store.current.server_port}",
        timeout=Environment.SCHEDULER.RUN_TRIGGER_TIMEOUT,
    )
    scheduler = Scheduler(store, ContentSourceClient(), trigger)
    uvicorn.run(
        create_control_app(scheduler),
        host=host or Environment.SERVICE.HOST,
        port=port or Environment.SCHEDULER.CONTROL_PORT,
        log_config=None,
    )


async def _run_once(config: RunConfig) -> RunResult:
    instrumentation = PlaywrightInstrumentation.from_environment()
    run_service = RunService(
        instrumentation,
        ProcessMetrics(include_process_metrics=False),
        _summary_log(),
        restart_hook=None,
    )
    try:
        return await run_service.run(config)
    finally:
        await instrumentation.aclose()


@app.command
def run(
    url: str,
    test: str,
    *,
    title: str = "",
    log_level: LogLevel = None,
) -> int:
    """Play URL once for TEST ("5" or "5r5" minutes) and print the result as JSON.

    Exit status is 0 for a FINISHED run, 1 otherwise, 2 for a malformed TEST.
    """
    setup_rich_logging(log_level or Environment.SERVICE.LOG_LEVEL)
    console = Console()
    try:
        result = asyncio.run(_run_once(RunConfig(url=url, test=test, title=title)))
    except InvalidTestSpec as e:
        console.print(f"[red]{e}[/red]")
        return 2
    console.print_json(orjson.dumps(result.model_dump(mode="json")).decode())
    return 0 if result.success else 1


def main() -> None:
    sys.exit(app())


if __name__ == "__main__":
    main()
