# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Data models for a single playback run."""

import re
from datetime import datetime, timezone
from typing import Any
from urllib.parse import parse_qs, urlsplit

from pydantic import Field

from qoeprobe.common.constants import MILLIS_PER_MINUTE, MILLIS_PER_SECOND
from qoeprobe.common.enums import DegradedCondition, RunOutcome
from qoeprobe.common.exceptions import InvalidTestSpec
from qoeprobe.common.models import FrozenModel, QoEProbeBaseModel
from qoeprobe.network.models import NetworkObservation, RunSummary
from qoeprobe.network.patterns import (
    DIRECT_ID_PATTERN,
    EXPECTED_QUALITY_QUERY_PARAM,
    KINOPOISK_ID_PATTERN,
)

SINGLE_PHASE_TEST_SPEC = re.compile(r"^(\d+)$")
REWIND_TEST_SPEC = re.compile(r"^(\d+)r(\d+)$")


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds")


class TestPhases(FrozenModel):
    """Timed playback phases derived from a test spec.

    Attributes:
        first_phase_ms: Duration of the first playback phase
        second_phase_ms: Duration of the phase after the seek, 0 without rewind
        has_rewind: Whether to seek to the middle between the phases
    """

    __test__ = False  # not a pytest test class

    first_phase_ms: int = Field(ge=0)
    second_phase_ms: int = Field(default=0, ge=0)
    has_rewind: bool = False

    @property
    def first_phase_seconds(self) -> float:
        return self.first_phase_ms / MILLIS_PER_SECOND

    @property
    def second_phase_seconds(self) -> float:
        return self.second_phase_ms / MILLIS_PER_SECOND

    def describe(self) -> str:
        if self.has_rewind:
            return (
                f"{self.first_phase_ms // MILLIS_PER_MINUTE}min - seek - "
                f"{self.second_phase_ms // MILLIS_PER_MINUTE}min"
            )
        return f"{self.first_phase_ms // MILLIS_PER_MINUTE}min"


def parse_test_spec(test_spec: str) -> TestPhases:
    """Parse ``"<N>"`` or ``"<N>r<M>"`` (minutes) into playback phases.

    Raises:
        InvalidTestSpec: If ``test_spec`` matches neither grammar
    """
    if match := REWIND_TEST_SPEC.fullmatch(test_spec):
        return TestPhases(
            first_phase_ms=int(match.group(1)) * MILLIS_PER_MINUTE,
            second_phase_ms=int(match.group(2)) * MILLIS_PER_MINUTE,
            has_rewind=True,
        )
    if match := SINGLE_PHASE_TEST_SPEC.fullmatch(test_spec):
        return TestPhases(first_phase_ms=int(match.group(1)) * MILLIS_PER_MINUTE)
    raise InvalidTestSpec(test_spec)


def expected_quality_from_url(url: str) -> int | None:
    """Read the expected quality tier from the ``monq`` query parameter."""
    values = parse_qs(urlsplit(url).query).get(EXPECTED_QUALITY_QUERY_PARAM)
    if not values:
        return None
    try:
        return int(values[0])
    except ValueError:
        return None


class RunConfig(FrozenModel):
    """Input of a single playback run.

    Attributes:
        url: Page that hosts the player
        test: Test spec, ``"<N>"`` or ``"<N>r<M>"`` minutes
        title: Display title of the played item
        manual: False for runs started by the scheduler; only those may request
            a process restart after a server error
    """

    url: str = Field(min_length=1)
    test: str
    title: str = ""
    manual: bool = True

    @property
    def expected_quality(self) -> int | None:
        return expected_quality_from_url(self.url)

    @property
    def kinopoisk_id(self) -> str:
        match = KINOPOISK_ID_PATTERN.search(self.url)
        return match.group(1) if match else ""

    @property
    def direct_id(self) -> str:
        match = DIRECT_ID_PATTERN.search(self.url)
        return match.group(1) if match else ""


class RunMetrics(QoEProbeBaseModel):
    """Per-run metadata snapshot, sent as the final ``done`` event."""

    test_start: str = Field(default_factory=utc_now_iso)
    test_finish: str = ""
    test_type: str
    item_title: str = ""
    item_direct_id: str = ""
    item_kp_id: str = ""
    expected_quality: int | None = None
    delivered_quality: int | None = None
    test_status: str = "IN PROGRESS"
    error: str | None = None
    degraded: list[DegradedCondition] = Field(default_factory=list)
    requests: int = 0
    suspicious_requests: list[dict[str, Any]] = Field(default_factory=list)

    @classmethod
    def for_run(cls, config: RunConfig) -> "RunMetrics":
        return cls(
            test_type=config.test,
            item_title=config.title,
            item_direct_id=config.direct_id,
            item_kp_id=config.kinopoisk_id,
            expected_quality=config.expected_quality,
        )

    def record_suspicious(self, observation: NetworkObservation) -> None:
        self.suspicious_requests.append(observation.to_stream_payload())


class RunResult(FrozenModel):
    """Everything reported about a run once it reached a terminal state."""

    outcome: RunOutcome
    summary: RunSummary
    metrics: RunMetrics

    @property
    def success(self) -> bool:
        return self.outcome == RunOutcome.FINISHED
