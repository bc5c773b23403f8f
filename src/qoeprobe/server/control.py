# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Control API that mutates the scheduler configuration at runtime."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import APIRouter, Body, FastAPI
from fastapi.responses import JSONResponse, PlainTextResponse

from qoeprobe.common.event_loop_monitor import EventLoopMonitor
from qoeprobe.scheduler import Scheduler, SchedulerConfig, SchedulerConfigPatch


def _config_response(config: SchedulerConfig) -> dict[str, Any]:
    return {"status": "ok", "config": config.model_dump(by_alias=True)}


def create_control_router(scheduler: Scheduler) -> APIRouter:
    router = APIRouter(prefix="/cronrun")

    @router.get("/config")
    async def get_config() -> dict[str, Any]:
        return _config_response(scheduler.store.current)

    @router.post("/config")
    async def update_config(
        patch: SchedulerConfigPatch | None = Body(None),
    ) -> dict[str, Any]:
        """Apply non-empty fields and re-arm the next run. Never starts a run."""
        config = await scheduler.update_config(patch or SchedulerConfigPatch())
        return _config_response(config)

    return router


def create_control_app(scheduler: Scheduler) -> FastAPI:
    """Standalone control server for a scheduler that triggers runs over HTTP."""
    monitor = EventLoopMonitor(scheduler.id)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        monitor.start()
        await scheduler.start()
        try:
            yield
        finally:
            await scheduler.stop()
            monitor.stop()

    app = FastAPI(title="qoeprobe-scheduler", lifespan=lifespan)
    app.include_router(create_control_router(scheduler))

    @app.get("/healthz", response_class=PlainTextResponse)
    async def healthz() -> PlainTextResponse:
        if scheduler.is_healthy():
            return PlainTextResponse("OK")
        return PlainTextResponse("unhealthy", status_code=503)

    @app.get("/readyz")
    async def readyz() -> JSONResponse:
        details = scheduler.get_health_details().to_dict()
        return JSONResponse(details, status_code=200 if scheduler.is_ready() else 503)

    return app
