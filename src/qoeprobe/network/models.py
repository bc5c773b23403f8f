# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Data models for network observation and run-level aggregation."""

from dataclasses import dataclass
from typing import Any

from pydantic import Field

from qoeprobe.common.constants import BYTES_PER_MEBIBYTE
from qoeprobe.common.enums import NetworkEventType, RequestStatus, ResourceKind
from qoeprobe.common.models import FrozenModel


class RawNetworkEvent(FrozenModel):
    """One low-level network lifecycle event delivered by the instrumentation.

    Attributes:
        type: Which lifecycle step this event reports
        request_id: Identifier shared by all events of one request
        timestamp: Seconds on the instrumentation's monotonic clock
        url: Request URL (request-started only)
        http_status: Response status (response-headers only)
        ttfb_ms: Time to first byte measured by the browser, if it reports one
        encoded_bytes: Bytes transferred over the wire (request-finished only)
        error_text: Failure reason supplied by the browser (request-failed only)
        entrypoint: Optional routing label of the serving entrypoint
        router: Optional routing label of the serving router
    """

    type: NetworkEventType
    request_id: str
    timestamp: float
    url: str | None = None
    http_status: int | None = None
    ttfb_ms: float | None = None
    encoded_bytes: int | None = None
    error_text: str | None = None
    entrypoint: str | None = None
    router: str | None = None


@dataclass(slots=True)
class RequestState:
    """What is known about an in-flight media request between its events."""

    request_id: str
    url: str
    started_at: float
    ttfb_ms: float | None = None
    http_status: int | None = None
    entrypoint: str | None = None
    router: str | None = None


class NetworkObservation(FrozenModel):
    """A finished or failed media request, classified and normalized."""

    request_id: str
    url: str
    kind: ResourceKind
    status: RequestStatus
    started_at: float = Field(description="Request start on the instrumentation clock (s)")
    ttfb_ms: float | None = None
    total_ms: float | None = None
    bytes: int = 0
    mbps: float | None = None
    http_status: int | None = None
    quality: int | None = Field(
        default=None, description="Quality tier detected from the URL, if any"
    )
    reason: str | None = Field(default=None, description="Failure reason (FAILED only)")
    entrypoint: str | None = None
    router: str | None = None

    @property
    def duration_seconds(self) -> float:
        return (self.total_ms or 0.0) / 1000

    def to_stream_payload(self) -> dict[str, Any]:
        """Shape sent to live subscribers for every media request."""
        if self.status == RequestStatus.FAILED:
            return {
                "url": self.url,
                "type": "request",
                "kind": str(self.kind),
                "status": str(self.status),
                "reason": self.reason,
            }
        return {
            "url": self.url,
            "type": "request",
            "kind": str(self.kind),
            "http": self.http_status,
            "status": str(self.status),
            "mbps": round(self.mbps, 4) if self.mbps is not None else None,
            "size_mb": round(self.bytes / BYTES_PER_MEBIBYTE, 3),
            "ttfb_ms": self.ttfb_ms,
            "total_ms": round(self.total_ms, 1) if self.total_ms is not None else None,
        }


class GroupEntry(FrozenModel):
    """Bytes and request count attributed to one routing label."""

    label: str
    bytes: int
    bytes_mb: float
    count: int


class RunSummary(FrozenModel):
    """Snapshot derived once from a RunAggregate when the run ends."""

    requests_total: int
    requests_ok: int
    requests_slow: int
    requests_failed: int
    bytes_total: int
    bytes_mb: float
    duration_sum_sec: float
    avg_mbps: float | None
    ttf_playlist_ms: float | None
    ttf_segment_ms: float | None
    slow_percent: float
    p50_ttfb_ms: float | None
    p90_ttfb_ms: float | None
    p50_total_ms: float | None
    p90_total_ms: float | None
    top_entrypoints_by_bytes: list[GroupEntry] = Field(default_factory=list)
    top_routers_by_bytes: list[GroupEntry] = Field(default_factory=list)
    quality_expected: int | None = None
    quality_detected: int | None = None
    quality_ok: bool | None = None
