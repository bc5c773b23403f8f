# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from enum import Enum


class CaseInsensitiveStrEnum(str, Enum):
    """String enum that compares and looks up its members case-insensitively."""

    def __str__(self) -> str:
        return self.value

    def __eq__(self, other: object) -> bool:
        if isinstance(other, str):
            return self.value.lower() == other.lower()
        return super().__eq__(other)

    def __hash__(self) -> int:
        return hash(self.value.lower())

    @classmethod
    def _missing_(cls, value: object):
        if isinstance(value, str):
            for member in cls:
                if member.value.lower() == value.lower():
                    return member
        return None


class LifecycleState(CaseInsensitiveStrEnum):
    """Lifecycle of a long-lived service (run server, scheduler)."""

    CREATED = "created"
    STARTING = "starting"
    RUNNING = "running"
    STOPPING = "stopping"
    STOPPED = "stopped"
    FAILED = "failed"


class ResourceKind(CaseInsensitiveStrEnum):
    """Kind of media resource a network request fetched."""

    PLAYLIST = "playlist"
    SEGMENT = "segment"
    PROGRESSIVE_VIDEO = "progressive-video"
    OTHER_MEDIA = "other-media"

    @property
    def is_slowness_tracked(self) -> bool:
        """Whether throughput below the slow threshold marks this kind as SLOW."""
        return self in (ResourceKind.SEGMENT, ResourceKind.PROGRESSIVE_VIDEO)


class RequestStatus(CaseInsensitiveStrEnum):
    OK = "OK"
    SLOW = "SLOW"
    FAILED = "FAILED"


class NetworkEventType(CaseInsensitiveStrEnum):
    """Lifecycle events emitted by the browser network instrumentation."""

    REQUEST_STARTED = "request-started"
    RESPONSE_HEADERS = "response-headers"
    REQUEST_FINISHED = "request-finished"
    REQUEST_FAILED = "request-failed"


class RunState(CaseInsensitiveStrEnum):
    """Phases a single playback run moves through."""

    STARTING = "STARTING"
    PAGE_LOADING = "PAGE_LOADING"
    AWAITING_PLAYER = "AWAITING_PLAYER"
    AWAITING_PLAYLIST = "AWAITING_PLAYLIST"
    PHASE_ONE = "PHASE_ONE"
    SEEKING = "SEEKING"
    PHASE_TWO = "PHASE_TWO"
    FINALIZING = "FINALIZING"
    FINISHED = "FINISHED"
    ERROR = "ERROR"
    SERVER_ERROR = "SERVER_ERROR"
    PLAYER_NOT_READY = "PLAYER_NOT_READY"


class RunOutcome(CaseInsensitiveStrEnum):
    """Terminal outcome of a run, reported once per run."""

    FINISHED = "FINISHED"
    ERROR = "ERROR"
    SERVER_ERROR = "SERVER_ERROR"
    PLAYER_NOT_READY = "PLAYER_NOT_READY"

    @property
    def run_state(self) -> RunState:
        return RunState(self.value)


class DegradedCondition(CaseInsensitiveStrEnum):
    """Non-fatal conditions recorded on a run that still completes."""

    PLAYLIST_NOT_LOADED = "PLAYLIST_NOT_LOADED"
    SEEK_FAILED = "SEEK_FAILED"
    INSTRUMENTATION_FAILURE = "INSTRUMENTATION_FAILURE"
