# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Kubernetes-style health checks for the run server and the scheduler.

- is_healthy(): Liveness - the process is up and has not failed.
- is_ready(): Readiness - the service finished starting and accepts work.
"""

from __future__ import annotations

from dataclasses import dataclass

from qoeprobe.common.enums import LifecycleState


@dataclass(frozen=True, slots=True)
class HealthCheckResult:
    """Result of the health check."""

    service_id: str
    state: LifecycleState
    healthy: bool
    ready: bool

    def to_dict(self) -> dict[str, str | bool]:
        return {
            "service_id": self.service_id,
            "state": str(self.state),
            "healthy": self.healthy,
            "ready": self.ready,
        }


class HealthCheckMixin:
    """Liveness and readiness derived from a ``LifecycleState``.

    Holders set ``self.state`` as they start and stop; the HTTP layer exposes
    the result on ``/healthz`` and ``/readyz``.
    """

    def __init__(self, service_id: str, **kwargs) -> None:
        super().__init__(**kwargs)
        self.id = service_id
        self.state = LifecycleState.CREATED

    def is_healthy(self) -> bool:
        """Liveness check: False only once the service has FAILED."""
        return self.state != LifecycleState.FAILED

    def is_ready(self) -> bool:
        """Readiness check: True only while RUNNING."""
        return self.state == LifecycleState.RUNNING

    def get_health_details(self) -> HealthCheckResult:
        return HealthCheckResult(
            service_id=self.id,
            state=self.state,
            healthy=self.is_healthy(),
            ready=self.is_ready(),
        )
