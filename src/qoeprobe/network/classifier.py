# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Turns raw instrumentation events into classified network observations."""

from typing import NamedTuple

from qoeprobe.common.constants import (
    BITS_PER_BYTE,
    BITS_PER_MEGABIT,
    MILLIS_PER_SECOND,
    UNKNOWN_FAILURE_REASON,
)
from qoeprobe.common.enums import NetworkEventType, RequestStatus, ResourceKind
from qoeprobe.common.mixins import QoEProbeLoggerMixin
from qoeprobe.network.models import NetworkObservation, RawNetworkEvent, RequestState
from qoeprobe.network.patterns import (
    MEDIA_URL_PATTERN,
    QUALITY_URL_PATTERN,
    RESOURCE_KIND_PATTERNS,
)

__all__ = [
    "NetworkEventClassifier",
    "UrlClassification",
    "build_observation",
    "classify_status",
    "classify_url",
    "compute_mbps",
    "detect_quality",
    "is_media_url",
]


class UrlClassification(NamedTuple):
    kind: ResourceKind
    quality: int | None


def is_media_url(url: str) -> bool:
    return bool(MEDIA_URL_PATTERN.search(url))


def detect_quality(url: str) -> int | None:
    """Return the quality tier encoded in a packager URL, if any."""
    match = QUALITY_URL_PATTERN.search(url)
    return int(match.group(1)) if match else None


def classify_url(url: str) -> UrlClassification | None:
    """Classify a URL into a media kind and quality token.

    Returns None for URLs that are not media at all; those never reach a run's
    aggregate.
    """
    if not is_media_url(url):
        return None
    for kind, pattern in RESOURCE_KIND_PATTERNS:
        if pattern.search(url):
            return UrlClassification(kind, detect_quality(url))
    return UrlClassification(ResourceKind.OTHER_MEDIA, detect_quality(url))


def compute_mbps(num_bytes: int, duration_seconds: float) -> float | None:
    """Throughput in megabits per second, None when either input is zero."""
    if num_bytes <= 0 or duration_seconds <= 0:
        return None
    return (num_bytes * BITS_PER_BYTE) / (duration_seconds * BITS_PER_MEGABIT)


def classify_status(
    event_type: NetworkEventType,
    kind: ResourceKind,
    mbps: float | None,
    slow_threshold_mbps: float,
) -> RequestStatus:
    if event_type == NetworkEventType.REQUEST_FAILED:
        return RequestStatus.FAILED
    if kind.is_slowness_tracked and mbps is not None and mbps < slow_threshold_mbps:
        return RequestStatus.SLOW
    return RequestStatus.OK


def build_observation(
    event: RawNetworkEvent, state: RequestState, slow_threshold_mbps: float
) -> NetworkObservation | None:
    """Build the observation for a terminal event of a tracked request.

    Args:
        event: A request-finished or request-failed event
        state: Everything accumulated for the same request so far
        slow_threshold_mbps: Throughput floor for segment-like kinds

    Returns:
        The observation, or None if the request is not media or the event is
        not terminal.
    """
    if event.type not in (
        NetworkEventType.REQUEST_FINISHED,
        NetworkEventType.REQUEST_FAILED,
    ):
        return None
    classification = classify_url(state.url)
    if classification is None:
        return None

    duration_seconds = max(event.timestamp - state.started_at, 0.0)
    failed = event.type == NetworkEventType.REQUEST_FAILED
    num_bytes = 0 if failed else (event.encoded_bytes or 0)
    mbps = None if failed else compute_mbps(num_bytes, duration_seconds)

    return NetworkObservation(
        request_id=state.request_id,
        url=state.url,
        kind=classification.kind,
        status=classify_status(
            event.type, classification.kind, mbps, slow_threshold_mbps
        ),
        started_at=state.started_at,
        ttfb_ms=state.ttfb_ms,
        total_ms=duration_seconds * MILLIS_PER_SECOND,
        bytes=num_bytes,
        mbps=mbps,
        http_status=state.http_status,
        quality=classification.quality,
        reason=(event.error_text or UNKNOWN_FAILURE_REASON) if failed else None,
        entrypoint=state.entrypoint,
        router=state.router,
    )


class NetworkEventClassifier(QoEProbeLoggerMixin):
    """Tracks per-request state across events and emits observations.

    One instance per run. Not thread-safe: it is fed from a single dispatcher.
    """

    def __init__(self, slow_threshold_mbps: float, **kwargs) -> None:
        super().__init__(**kwargs)
        self.slow_threshold_mbps = slow_threshold_mbps
        self._requests: dict[str, RequestState] = {}

    @property
    def in_flight(self) -> int:
        return len(self._requests)

    def handle(self, event: RawNetworkEvent) -> NetworkObservation | None:
        """Feed one event, returning an observation when a media request ends."""
        match event.type:
            case NetworkEventType.REQUEST_STARTED:
                self._on_started(event)
                return None
            case NetworkEventType.RESPONSE_HEADERS:
                self._on_headers(event)
                return None
            case NetworkEventType.REQUEST_FINISHED | NetworkEventType.REQUEST_FAILED:
                state = self._requests.pop(event.request_id, None)
                if state is None:
                    return None
                return build_observation(event, state, self.slow_threshold_mbps)
        return None

    def _on_started(self, event: RawNetworkEvent) -> None:
        url = event.url or ""
        if not is_media_url(url):
            # A redirect can move a tracked id to a non-media URL.
            self._requests.pop(event.request_id, None)
            return
        self._requests[event.request_id] = RequestState(
            request_id=event.request_id,
            url=url,
            started_at=event.timestamp,
            entrypoint=event.entrypoint,
            router=event.router,
        )
        if self.is_trace_enabled:
            self.trace(f"Tracking media request {event.request_id}: {url}")

    def _on_headers(self, event: RawNetworkEvent) -> None:
        state = self._requests.get(event.request_id)
        if state is None:
            return
        state.http_status = event.http_status
        if event.ttfb_ms is not None:
            state.ttfb_ms = event.ttfb_ms
        else:
            state.ttfb_ms = max(event.timestamp - state.started_at, 0.0) * MILLIS_PER_SECOND
        if event.entrypoint:
            state.entrypoint = event.entrypoint
        if event.router:
            state.router = event.router
