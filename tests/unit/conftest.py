# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import pytest

from qoeprobe.reporting import LiveReporter, ProcessMetrics


@pytest.fixture
def metrics() -> ProcessMetrics:
    return ProcessMetrics(include_process_metrics=False)


@pytest.fixture
def reporter(metrics: ProcessMetrics) -> LiveReporter:
    return LiveReporter(metrics)
