# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0


class QoEProbeError(Exception):
    """Base class for all exceptions raised by QoE Probe."""

    def __str__(self) -> str:
        return f"{self.__class__.__name__}: {super().__str__()}"


class InvalidTestSpec(QoEProbeError, ValueError):
    """The test spec does not match `<N>` or `<N>r<M>`."""

    def __init__(self, test_spec: str) -> None:
        super().__init__(
            f"Invalid test spec {test_spec!r}. Expected '<minutes>' (e.g. '5') "
            "or '<minutes>r<minutes>' (e.g. '2r2')."
        )
        self.test_spec = test_spec


class TargetUnavailable(QoEProbeError):
    """The target page failed to load for a reason other than a 5xx response."""


class ServerError(QoEProbeError):
    """The target answered with a 5xx status."""

    def __init__(self, status: int, url: str) -> None:
        super().__init__(f"Target responded with HTTP {status}: {url}")
        self.status = status
        self.url = url


class PlayerNotReady(QoEProbeError):
    """The in-page player object never appeared within the readiness timeout."""


class PlaylistNotLoaded(QoEProbeError):
    """No playlist was observed within the playlist timeout. Degraded, not fatal."""


class InstrumentationFailure(QoEProbeError):
    """Unexpected error while processing a network instrumentation event."""


class ContentSourceUnreachable(QoEProbeError):
    """The content source could not be fetched after all retry attempts."""

    def __init__(self, url: str, attempts: int, last_error: BaseException | None) -> None:
        super().__init__(
            f"Content source {url} unreachable after {attempts} attempts: {last_error!r}"
        )
        self.url = url
        self.attempts = attempts
        self.last_error = last_error


class RunInProgress(QoEProbeError):
    """A run was requested while another run is still active."""


class RunTriggerFailed(QoEProbeError):
    """The run server rejected a triggered run or closed the stream before ``done``."""
