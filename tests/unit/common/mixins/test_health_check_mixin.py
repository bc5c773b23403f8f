# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Tests for HealthCheckMixin."""

import pytest

from qoeprobe.common.enums import LifecycleState
from qoeprobe.common.mixins import HealthCheckMixin, QoEProbeLoggerMixin


class FakeService(QoEProbeLoggerMixin, HealthCheckMixin):
    def __init__(self, state: LifecycleState, service_id: str = "svc") -> None:
        super().__init__(service_id=service_id)
        self.state = state


class TestHealthCheckMixin:
    def test_starts_created(self) -> None:
        service = FakeService(LifecycleState.CREATED)
        service_default = HealthCheckMixin(service_id="fresh")
        assert service.state == LifecycleState.CREATED
        assert service_default.state == LifecycleState.CREATED
        assert service_default.id == "fresh"

    @pytest.mark.parametrize(
        "state,healthy,ready",
        [
            (LifecycleState.CREATED, True, False),
            (LifecycleState.STARTING, True, False),
            (LifecycleState.RUNNING, True, True),
            (LifecycleState.STOPPING, True, False),
            (LifecycleState.STOPPED, True, False),
            (LifecycleState.FAILED, False, False),
        ],
    )
    def test_health_and_readiness(self, state, healthy, ready) -> None:
        service = FakeService(state)
        assert service.is_healthy() is healthy
        assert service.is_ready() is ready

    def test_get_health_details_to_dict(self) -> None:
        details = FakeService(LifecycleState.RUNNING, "scheduler").get_health_details()
        assert details.to_dict() == {
            "service_id": "scheduler",
            "state": "running",
            "healthy": True,
            "ready": True,
        }

    def test_logger_named_after_module(self) -> None:
        service = FakeService(LifecycleState.CREATED)
        assert service.logger.name == __name__
