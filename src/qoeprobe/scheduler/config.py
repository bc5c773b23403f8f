# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Live-mutable scheduler configuration and its partial-update rule."""

import asyncio
from typing import Any

from pydantic import ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from qoeprobe.common.environment import Environment
from qoeprobe.common.models import FrozenModel, QoEProbeBaseModel

PATCHABLE_FIELDS = ("test", "quality", "json_endpoint", "domain")


class SchedulerConfig(FrozenModel):
    """Process-wide scheduler settings. Serialized with camelCase keys."""

    model_config = ConfigDict(
        extra="forbid", frozen=True, alias_generator=to_camel, populate_by_name=True
    )

    test: str
    quality: str
    domain: str
    json_endpoint: str
    server_port: int = Field(ge=1, le=65535)

    @classmethod
    def from_environment(cls) -> "SchedulerConfig":
        settings = Environment.SCHEDULER
        return cls(
            test=settings.TEST,
            quality=settings.QUALITY,
            domain=settings.DOMAIN,
            json_endpoint=settings.JSON_ENDPOINT,
            server_port=settings.SERVER_PORT,
        )


class SchedulerConfigPatch(QoEProbeBaseModel):
    """Body of a config update. Every field is optional.

    Unknown keys and non-string values are ignored rather than rejected.
    """

    model_config = ConfigDict(
        extra="ignore", alias_generator=to_camel, populate_by_name=True
    )

    test: str | None = None
    quality: str | None = None
    json_endpoint: str | None = None
    domain: str | None = None

    @field_validator("*", mode="before")
    @classmethod
    def _strings_only(cls, value: Any) -> str | None:
        return value if isinstance(value, str) else None


def apply_patch(config: SchedulerConfig, patch: SchedulerConfigPatch) -> SchedulerConfig:
    """Overwrite every field whose patched value is non-empty after trimming."""
    updates: dict[str, str] = {}
    for name in PATCHABLE_FIELDS:
        value = getattr(patch, name)
        if value is not None and value.strip():
            updates[name] = value.strip()
    if not updates:
        return config
    return config.model_copy(update=updates)


class SchedulerConfigStore:
    """Single owner of the current ``SchedulerConfig``.

    The config itself is immutable; updates swap the reference under a lock, so a
    reader always sees either the old or the new record, never a mix.
    """

    def __init__(self, initial: SchedulerConfig | None = None) -> None:
        self._config = initial or SchedulerConfig.from_environment()
        self._lock = asyncio.Lock()

    @property
    def current(self) -> SchedulerConfig:
        return self._config

    async def update(self, patch: SchedulerConfigPatch) -> SchedulerConfig:
        async with self._lock:
            self._config = apply_patch(self._config, patch)
            return self._config
