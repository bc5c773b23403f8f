# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import pytest

from qoeprobe.common.enums import RequestStatus, ResourceKind, RunOutcome
from qoeprobe.network import NetworkObservation, RunAggregate
from qoeprobe.reporting import ProcessMetrics


def observation(status: RequestStatus, **kwargs) -> NetworkObservation:
    defaults = {
        "request_id": "1",
        "url": "https://cdn/seg.ts",
        "kind": ResourceKind.SEGMENT,
        "started_at": 0.0,
        "ttfb_ms": 40.0,
        "total_ms": 800.0,
        "bytes": 500_000,
        "mbps": 5.0,
    }
    return NetworkObservation(status=status, **(defaults | kwargs))


class TestProcessMetrics:
    @pytest.fixture
    def metrics(self) -> ProcessMetrics:
        return ProcessMetrics(include_process_metrics=False)

    def sample(self, metrics: ProcessMetrics, name: str, labels: dict | None = None):
        return metrics.registry.get_sample_value(name, labels or {})

    def test_observe_request(self, metrics):
        metrics.observe_request(observation(RequestStatus.OK))
        metrics.observe_request(observation(RequestStatus.SLOW, mbps=1.0))

        assert self.sample(metrics, "qoeprobe_media_requests_total", {"status": "OK"}) == 1
        assert self.sample(metrics, "qoeprobe_media_requests_total", {"status": "SLOW"}) == 1
        assert self.sample(metrics, "qoeprobe_media_bytes_total") == 1_000_000
        assert self.sample(metrics, "qoeprobe_media_mbps_count") == 2
        assert self.sample(metrics, "qoeprobe_ttfb_ms_sum") == 80.0
        assert self.sample(metrics, "qoeprobe_total_ms_bucket", {"le": "1000.0"}) == 2

    def test_failed_request_only_counted(self, metrics):
        metrics.observe_request(
            observation(RequestStatus.FAILED, bytes=0, mbps=None, reason="x")
        )
        assert (
            self.sample(metrics, "qoeprobe_media_requests_total", {"status": "FAILED"})
            == 1
        )
        assert self.sample(metrics, "qoeprobe_media_bytes_total") == 0
        assert self.sample(metrics, "qoeprobe_media_mbps_count") == 0

    def test_observe_run(self, metrics):
        aggregate = RunAggregate()
        aggregate.add(observation(RequestStatus.SLOW, quality=480))
        summary = aggregate.summarize(expected_quality=720)

        metrics.observe_run(RunOutcome.FINISHED, summary)

        assert self.sample(metrics, "qoeprobe_runs_total", {"result": "FINISHED"}) == 1
        assert self.sample(metrics, "qoeprobe_slow_percent") == 100.0
        assert self.sample(metrics, "qoeprobe_quality_compare_total", {"ok": "false"}) == 1
        assert self.sample(metrics, "qoeprobe_ttf_first_segment_ms") is not None

    def test_unknown_quality_not_compared(self, metrics):
        metrics.observe_run(
            RunOutcome.ERROR, RunAggregate().summarize(expected_quality=None)
        )
        assert self.sample(metrics, "qoeprobe_runs_total", {"result": "ERROR"}) == 1
        assert self.sample(metrics, "qoeprobe_quality_compare_total", {"ok": "true"}) is None

    def test_render_text_exposition(self):
        metrics = ProcessMetrics()
        text = metrics.render().decode()
        assert "# TYPE qoeprobe_runs_total counter" in text
        assert "python_info" in text
        assert metrics.content_type.startswith("text/plain")

    def test_instances_do_not_share_registries(self):
        first, second = ProcessMetrics(), ProcessMetrics()
        first.runs_total.labels(result="FINISHED").inc()
        assert (
            second.registry.get_sample_value("qoeprobe_runs_total", {"result": "FINISHED"})
            is None
        )
