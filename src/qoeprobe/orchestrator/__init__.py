# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Single playback run: configuration, state machine and result models."""

from qoeprobe.orchestrator.models import (
    RunConfig,
    RunMetrics,
    RunResult,
    TestPhases,
    expected_quality_from_url,
    parse_test_spec,
    utc_now_iso,
)
from qoeprobe.orchestrator.orchestrator import RunOrchestrator

__all__ = [
    "RunConfig",
    "RunMetrics",
    "RunOrchestrator",
    "RunResult",
    "TestPhases",
    "expected_quality_from_url",
    "parse_test_spec",
    "utc_now_iso",
]
