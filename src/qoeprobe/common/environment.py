# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Process-wide settings loaded from environment variables.

Every group is a Pydantic Settings class with its own prefix, e.g.::

    QOEPROBE_SERVICE_PORT=3002
    QOEPROBE_RUNNER_SLOW_THRESHOLD_MBPS=3
    QOEPROBE_SCHEDULER_TEST=5r5

Access goes through the ``Environment`` namespace so tests can patch a single
group with ``patch.multiple("...Environment.RUNNER", ...)``.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class _ServiceSettings(BaseSettings):
    """HTTP service and event loop health settings."""

    model_config = SettingsConfigDict(env_prefix="QOEPROBE_SERVICE_")

    HOST: str = Field("0.0.0.0", description="Interface the HTTP server binds to")
    PORT: int = Field(3002, ge=1, le=65535, description="Port of the run server")
    LOG_LEVEL: str = Field("INFO", description="Root log level (TRACE, DEBUG, INFO, ...)")
    EVENT_LOOP_HEALTH_ENABLED: bool = Field(
        True, description="Warn when the event loop is blocked"
    )
    EVENT_LOOP_HEALTH_INTERVAL: float = Field(
        0.25, gt=0, description="Sleep interval of the event loop probe in seconds"
    )
    EVENT_LOOP_HEALTH_WARN_THRESHOLD_MS: float = Field(
        10.0, gt=0, description="Event loop lag above which a warning is logged"
    )


class _RunnerSettings(BaseSettings):
    """Settings for individual playback runs."""

    model_config = SettingsConfigDict(env_prefix="QOEPROBE_RUNNER_")

    HEADLESS: bool = Field(True, description="Launch the browser headless")
    BROWSER_ARGS: list[str] = Field(
        default_factory=lambda: [
            "--no-sandbox",
            "--disable-setuid-sandbox",
            "--disable-dev-shm-usage",
            "--autoplay-policy=no-user-gesture-required",
            "--mute-audio",
        ],
        description="Extra command line switches passed to the browser",
    )
    SLOW_THRESHOLD_MBPS: float = Field(
        3.0, ge=0, description="Segment throughput below which a request is SLOW"
    )
    TOP_N: int = Field(5, ge=1, description="Number of routing labels in summaries")
    PAGE_LOAD_TIMEOUT: float = Field(15.0, gt=0, description="Page load timeout (s)")
    PLAYER_READY_TIMEOUT: float = Field(
        8.0, gt=0, description="Time to wait for the in-page player object (s)"
    )
    PLAYLIST_READY_TIMEOUT: float = Field(
        8.0, gt=0, description="Time to wait for the first playlist (s)"
    )
    SEEK_PLAYER_TIMEOUT: float = Field(
        5.0, gt=0, description="Time to wait for the player before seeking (s)"
    )
    PLAYER_GLOBAL: str = Field(
        "CDNplayer", description="Name of the in-page player object"
    )
    SUMMARY_LOG_PATH: str | None = Field(
        None, description="Append one JSON line per finished run to this file"
    )


class _SchedulerSettings(BaseSettings):
    """Defaults of the periodic scheduler. Mutable at runtime via the control API."""

    model_config = SettingsConfigDict(env_prefix="QOEPROBE_SCHEDULER_")

    TEST: str = Field("5r5", description="Test spec used for scheduled runs")
    QUALITY: str = Field("1080", description="Expected quality appended as monq")
    DOMAIN: str = Field("tg.piratka.me", description="Routing/domain tag")
    JSON_ENDPOINT: str = Field(
        "https://master.futmax.info/test/random_movie",
        description="Content source returning the next item to play",
    )
    SERVER_PORT: int = Field(3002, ge=1, le=65535, description="Port of the run server")
    CONTROL_PORT: int = Field(3100, ge=1, le=65535, description="Control API port")
    AD_GAP_SECONDS: float = Field(
        120.0, ge=0, description="Extra delay between runs for pre-roll adverts"
    )
    FETCH_ATTEMPTS: int = Field(4, ge=1, description="Content source fetch attempts")
    FETCH_BASE_DELAY: float = Field(
        1.5, ge=0, description="Linear backoff step between fetch attempts (s)"
    )
    FETCH_TIMEOUT: float = Field(10.0, gt=0, description="Content source timeout (s)")
    RUN_TRIGGER_TIMEOUT: float | None = Field(
        None, gt=0, description="Upper bound for a triggered run over HTTP (s)"
    )


class Environment:
    """Namespace holding one instance of every settings group."""

    SERVICE = _ServiceSettings()
    RUNNER = _RunnerSettings()
    SCHEDULER = _SchedulerSettings()
