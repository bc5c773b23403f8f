# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Periodic scheduling of runs against an external content source."""

from qoeprobe.scheduler.config import (
    PATCHABLE_FIELDS,
    SchedulerConfig,
    SchedulerConfigPatch,
    SchedulerConfigStore,
    apply_patch,
)
from qoeprobe.scheduler.content_source import (
    ContentItem,
    ContentSourceClient,
    build_target_url,
)
from qoeprobe.scheduler.scheduler import (
    Scheduler,
    next_delay_seconds,
    run_duration_minutes,
)
from qoeprobe.scheduler.triggers import (
    HttpRunTrigger,
    InProcessRunTrigger,
    RunTriggerProtocol,
)

__all__ = [
    "ContentItem",
    "ContentSourceClient",
    "HttpRunTrigger",
    "InProcessRunTrigger",
    "PATCHABLE_FIELDS",
    "RunTriggerProtocol",
    "Scheduler",
    "SchedulerConfig",
    "SchedulerConfigPatch",
    "SchedulerConfigStore",
    "apply_patch",
    "build_target_url",
    "next_delay_seconds",
    "run_duration_minutes",
]
