# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Live event stream, process metrics and summary persistence."""

from qoeprobe.reporting.events import (
    DONE_EVENT,
    SSE_HEADERS,
    SSE_MEDIA_TYPE,
    SUMMARY_EVENT,
    ServerSentEvent,
)
from qoeprobe.reporting.live_reporter import LiveReporter
from qoeprobe.reporting.metrics import ProcessMetrics
from qoeprobe.reporting.summary_log import SummaryLog

__all__ = [
    "DONE_EVENT",
    "LiveReporter",
    "ProcessMetrics",
    "SSE_HEADERS",
    "SSE_MEDIA_TYPE",
    "SUMMARY_EVENT",
    "ServerSentEvent",
    "SummaryLog",
]
