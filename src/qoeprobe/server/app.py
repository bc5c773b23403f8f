# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""HTTP surface of the run server: run trigger, live stream, health and metrics."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import JSONResponse, PlainTextResponse, Response, StreamingResponse

from qoeprobe.common.enums import LifecycleState
from qoeprobe.common.event_loop_monitor import EventLoopMonitor
from qoeprobe.common.exceptions import InvalidTestSpec, RunInProgress
from qoeprobe.common.mixins import HealthCheckMixin, QoEProbeLoggerMixin
from qoeprobe.instrumentation.protocols import BrowserInstrumentationProtocol
from qoeprobe.orchestrator import RunConfig
from qoeprobe.reporting import SSE_HEADERS, SSE_MEDIA_TYPE, ProcessMetrics
from qoeprobe.scheduler import Scheduler
from qoeprobe.server.control import create_control_router
from qoeprobe.server.run_service import RunService

ROOT_BANNER = (
    "QoE probe is alive.\n"
    "Use GET /run?test=5 or 5r5&title=...&url=<ENCODED_URL>"
)
FALSE_FLAGS = ("0", "false", "no", "off")


class ProbeServer(QoEProbeLoggerMixin, HealthCheckMixin):
    """Lifecycle owner of everything the run server process shares.

    Startup order: event loop monitor, then the embedded scheduler if any.
    Shutdown reverses it, cancels an active run and closes the browser last.
    """

    def __init__(
        self,
        run_service: RunService,
        metrics: ProcessMetrics,
        instrumentation: BrowserInstrumentationProtocol,
        scheduler: Scheduler | None = None,
        service_id: str = "run-server",
    ) -> None:
        super().__init__(service_id=service_id)
        self.run_service = run_service
        self.metrics = metrics
        self.instrumentation = instrumentation
        self.scheduler = scheduler
        self.event_loop_monitor = EventLoopMonitor(
            service_id, on_lag=metrics.observe_event_loop_lag
        )

    @asynccontextmanager
    async def lifespan(self, app: FastAPI) -> AsyncIterator[None]:
        self.state = LifecycleState.STARTING
        self.event_loop_monitor.start()
        try:
            if self.scheduler is not None:
                await self.scheduler.start()
        except Exception:
            self.state = LifecycleState.FAILED
            self.event_loop_monitor.stop()
            raise
        self.state = LifecycleState.RUNNING
        self.info(f"{self.id} ready")
        try:
            yield
        finally:
            self.state = LifecycleState.STOPPING
            if self.scheduler is not None:
                await self.scheduler.stop()
            await self.run_service.shutdown()
            await self.instrumentation.aclose()
            self.event_loop_monitor.stop()
            self.state = LifecycleState.STOPPED
            self.info(f"{self.id} stopped")

    def is_ready(self) -> bool:
        if self.scheduler is not None and not self.scheduler.is_ready():
            return False
        return super().is_ready()


def create_app(server: ProbeServer) -> FastAPI:
    app = FastAPI(title="qoeprobe", lifespan=server.lifespan)
    app.state.server = server

    @app.get("/", response_class=PlainTextResponse)
    async def root() -> str:
        return ROOT_BANNER

    @app.get("/healthz", response_class=PlainTextResponse)
    async def healthz() -> PlainTextResponse:
        if server.is_healthy():
            return PlainTextResponse("OK")
        return PlainTextResponse("unhealthy", status_code=503)

    @app.get("/readyz")
    async def readyz() -> JSONResponse:
        details = server.get_health_details().to_dict()
        return JSONResponse(details, status_code=200 if server.is_ready() else 503)

    @app.get("/metrics")
    async def metrics() -> Response:
        return Response(content=server.metrics.render(), media_type=server.metrics.content_type)

    @app.get("/run")
    async def run(
        url: str | None = Query(None),
        test: str | None = Query(None),
        title: str = Query(""),
        manual: str = Query("1"),
    ) -> StreamingResponse:
        if not url or not test:
            raise HTTPException(status_code=400, detail="Missing url or test parameter")
        config = RunConfig(
            url=url,
            test=test,
            title=title,
            manual=manual.strip().lower() not in FALSE_FLAGS,
        )
        try:
            reporter, _ = server.run_service.start(config)
        except InvalidTestSpec as e:
            raise HTTPException(status_code=400, detail=str(e)) from e
        except RunInProgress as e:
            raise HTTPException(status_code=409, detail=str(e)) from e
        return StreamingResponse(
            reporter.stream(), media_type=SSE_MEDIA_TYPE, headers=SSE_HEADERS
        )

    if server.scheduler is not None:
        app.include_router(create_control_router(server.scheduler))

    return app
