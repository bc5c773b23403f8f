# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Cumulative process metrics exposed in the Prometheus text format."""

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    PlatformCollector,
    ProcessCollector,
    generate_latest,
)

from qoeprobe.common.enums import RequestStatus, RunOutcome
from qoeprobe.network.models import NetworkObservation, RunSummary

MBPS_BUCKETS = (0.25, 0.5, 1, 2, 3, 5, 8, 12, 20, 30, 50, 80, 120)
TTFB_MS_BUCKETS = (10, 20, 30, 50, 75, 100, 150, 200, 300, 500, 800, 1200, 2000, 3000)
TOTAL_MS_BUCKETS = (10, 20, 50, 100, 200, 500, 1000, 2000, 5000, 10000, 20000)
LOOP_LAG_MS_BUCKETS = (1, 2, 5, 10, 25, 50, 100, 250, 500, 1000, 2500)


class ProcessMetrics:
    """Counters, histograms and last-run gauges for every run in this process.

    Each instance owns its registry so tests can create as many as they like.
    """

    content_type = CONTENT_TYPE_LATEST

    def __init__(
        self,
        registry: CollectorRegistry | None = None,
        namespace: str = "qoeprobe",
        include_process_metrics: bool = True,
    ) -> None:
        self.registry = registry or CollectorRegistry()
        if include_process_metrics:
            ProcessCollector(namespace=namespace, registry=self.registry)
            PlatformCollector(registry=self.registry)

        self.runs_total = Counter(
            "runs",
            "Total test runs by result",
            ["result"],
            namespace=namespace,
            registry=self.registry,
        )
        self.media_requests_total = Counter(
            "media_requests",
            "Media requests observed by status",
            ["status"],
            namespace=namespace,
            registry=self.registry,
        )
        self.media_bytes_total = Counter(
            "media_bytes",
            "Encoded bytes of finished media requests",
            namespace=namespace,
            registry=self.registry,
        )
        self.media_mbps = Histogram(
            "media_mbps",
            "Per-request download speed (Mbps)",
            buckets=MBPS_BUCKETS,
            namespace=namespace,
            registry=self.registry,
        )
        self.ttfb_ms = Histogram(
            "ttfb_ms",
            "Per-request time to first byte (ms)",
            buckets=TTFB_MS_BUCKETS,
            namespace=namespace,
            registry=self.registry,
        )
        self.total_ms = Histogram(
            "total_ms",
            "Per-request total load time (ms)",
            buckets=TOTAL_MS_BUCKETS,
            namespace=namespace,
            registry=self.registry,
        )
        self.ttf_playlist_ms = Gauge(
            "ttf_playlist_ms",
            "Time to first playlist from run start (ms, last run)",
            namespace=namespace,
            registry=self.registry,
        )
        self.ttf_first_segment_ms = Gauge(
            "ttf_first_segment_ms",
            "Time to first segment from run start (ms, last run)",
            namespace=namespace,
            registry=self.registry,
        )
        self.slow_percent = Gauge(
            "slow_percent",
            "Percentage of slow media requests in the last run",
            namespace=namespace,
            registry=self.registry,
        )
        self.quality_compare_total = Counter(
            "quality_compare",
            "Delivered vs expected quality comparisons by result",
            ["ok"],
            namespace=namespace,
            registry=self.registry,
        )
        self.event_loop_lag_ms = Histogram(
            "event_loop_lag_ms",
            "How late the event loop woke from its health-check timer (ms)",
            buckets=LOOP_LAG_MS_BUCKETS,
            namespace=namespace,
            registry=self.registry,
        )

    def observe_request(self, observation: NetworkObservation) -> None:
        self.media_requests_total.labels(status=str(observation.status)).inc()
        if observation.status == RequestStatus.FAILED:
            return
        self.media_bytes_total.inc(observation.bytes)
        if observation.ttfb_ms is not None:
            self.ttfb_ms.observe(observation.ttfb_ms)
        if observation.total_ms is not None:
            self.total_ms.observe(observation.total_ms)
        if observation.mbps is not None:
            self.media_mbps.observe(observation.mbps)

    def observe_run(self, outcome: RunOutcome, summary: RunSummary) -> None:
        self.runs_total.labels(result=str(outcome)).inc()
        if summary.ttf_playlist_ms is not None:
            self.ttf_playlist_ms.set(summary.ttf_playlist_ms)
        if summary.ttf_segment_ms is not None:
            self.ttf_first_segment_ms.set(summary.ttf_segment_ms)
        self.slow_percent.set(summary.slow_percent)
        if summary.quality_ok is not None:
            self.quality_compare_total.labels(ok=str(summary.quality_ok).lower()).inc()

    def observe_event_loop_lag(self, lag_ms: float) -> None:
        self.event_loop_lag_ms.observe(lag_ms)

    def render(self) -> bytes:
        return generate_latest(self.registry)
