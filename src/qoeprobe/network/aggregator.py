# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Running totals for one active run and the summary derived from them."""

import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass

import numpy as np

from qoeprobe.common.constants import (
    BITS_PER_BYTE,
    BITS_PER_MEGABIT,
    BYTES_PER_MEBIBYTE,
    MILLIS_PER_SECOND,
)
from qoeprobe.common.enums import RequestStatus, ResourceKind
from qoeprobe.network.models import GroupEntry, NetworkObservation, RunSummary

__all__ = [
    "GroupBucket",
    "RunAggregate",
    "percentile",
    "quality_satisfied",
    "top_n_by_bytes",
]


def percentile(values: Sequence[float], p: float) -> float | None:
    """Linear-interpolation percentile over a sorted copy of ``values``.

    Args:
        values: Samples, in any order
        p: Fraction between 0 and 1 (0.5 is the median)

    Returns:
        The interpolated value, or None when there are no samples.
    """
    if not 0 <= p <= 1:
        raise ValueError(f"Percentile fraction must be within [0, 1], got {p}")
    if len(values) == 0:
        return None
    return float(np.percentile(np.sort(np.asarray(values, dtype=float)), p * 100))


def quality_satisfied(expected: int | None, detected: int | None) -> bool | None:
    if expected is None or detected is None:
        return None
    return detected >= expected


@dataclass(slots=True)
class GroupBucket:
    bytes: int = 0
    count: int = 0


def top_n_by_bytes(buckets: dict[str, GroupBucket], n: int) -> list[GroupEntry]:
    ranked = sorted(buckets.items(), key=lambda item: item[1].bytes, reverse=True)
    return [
        GroupEntry(
            label=label,
            bytes=bucket.bytes,
            bytes_mb=round(bucket.bytes / BYTES_PER_MEBIBYTE, 3),
            count=bucket.count,
        )
        for label, bucket in ranked[:n]
    ]


def _bump(buckets: dict[str, GroupBucket], label: str | None, num_bytes: int) -> None:
    if not label:
        return
    bucket = buckets.setdefault(label, GroupBucket())
    bucket.bytes += num_bytes
    bucket.count += 1


class RunAggregate:
    """Accumulates observations for a single run.

    Single writer: only the run's event dispatcher calls ``add``, and the summary
    is computed after that dispatcher has drained, so no locking is needed.

    Args:
        clock: Monotonic clock in seconds; the run start is read from it on creation
    """

    def __init__(self, clock: Callable[[], float] = time.perf_counter) -> None:
        self._clock = clock
        self.started_at = clock()
        self.total = 0
        self.ok = 0
        self.slow = 0
        self.failed = 0
        self.bytes = 0
        self.seconds = 0.0
        self.ttfb_ms: list[float] = []
        self.total_ms: list[float] = []
        self.first_playlist_at: float | None = None
        self.first_segment_at: float | None = None
        self.delivered_quality: int | None = None
        self.by_entrypoint: dict[str, GroupBucket] = {}
        self.by_router: dict[str, GroupBucket] = {}
        self.suspicious: list[NetworkObservation] = []

    @property
    def playlist_seen(self) -> bool:
        return self.first_playlist_at is not None

    def add(self, observation: NetworkObservation) -> None:
        self.total += 1
        match observation.status:
            case RequestStatus.OK:
                self.ok += 1
            case RequestStatus.SLOW:
                self.slow += 1
                self.suspicious.append(observation)
            case RequestStatus.FAILED:
                self.failed += 1
                self.suspicious.append(observation)

        self.bytes += observation.bytes
        self.seconds += observation.duration_seconds
        if observation.ttfb_ms is not None:
            self.ttfb_ms.append(observation.ttfb_ms)
        if observation.total_ms is not None:
            self.total_ms.append(observation.total_ms)

        if observation.status != RequestStatus.FAILED:
            # First-write-wins: later tiers (ABR switches) do not overwrite it.
            if self.delivered_quality is None and observation.quality is not None:
                self.delivered_quality = observation.quality
            if (
                observation.kind == ResourceKind.PLAYLIST
                and self.first_playlist_at is None
            ):
                self.first_playlist_at = self._clock()
            elif (
                observation.kind == ResourceKind.SEGMENT
                and self.first_segment_at is None
            ):
                self.first_segment_at = self._clock()

        _bump(self.by_entrypoint, observation.entrypoint, observation.bytes)
        _bump(self.by_router, observation.router, observation.bytes)

    def _since_start_ms(self, at: float | None) -> float | None:
        if at is None:
            return None
        return round((at - self.started_at) * MILLIS_PER_SECOND, 1)

    def summarize(self, expected_quality: int | None, top_n: int = 5) -> RunSummary:
        avg_mbps = (
            (self.bytes * BITS_PER_BYTE) / (self.seconds * BITS_PER_MEGABIT)
            if self.seconds > 0
            else None
        )
        slow_percent = round(self.slow * 100 / self.total, 2) if self.total else 0.0
        return RunSummary(
            requests_total=self.total,
            requests_ok=self.ok,
            requests_slow=self.slow,
            requests_failed=self.failed,
            bytes_total=self.bytes,
            bytes_mb=round(self.bytes / BYTES_PER_MEBIBYTE, 3),
            duration_sum_sec=round(self.seconds, 3),
            avg_mbps=avg_mbps,
            ttf_playlist_ms=self._since_start_ms(self.first_playlist_at),
            ttf_segment_ms=self._since_start_ms(self.first_segment_at),
            slow_percent=slow_percent,
            p50_ttfb_ms=percentile(self.ttfb_ms, 0.5),
            p90_ttfb_ms=percentile(self.ttfb_ms, 0.9),
            p50_total_ms=percentile(self.total_ms, 0.5),
            p90_total_ms=percentile(self.total_ms, 0.9),
            top_entrypoints_by_bytes=top_n_by_bytes(self.by_entrypoint, top_n),
            top_routers_by_bytes=top_n_by_bytes(self.by_router, top_n),
            quality_expected=expected_quality,
            quality_detected=self.delivered_quality,
            quality_ok=quality_satisfied(expected_quality, self.delivered_quality),
        )
