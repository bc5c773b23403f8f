# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Ways for the scheduler to start a run and learn its outcome."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

import aiohttp

from qoeprobe.common.enums import RunOutcome
from qoeprobe.common.exceptions import RunTriggerFailed
from qoeprobe.common.mixins import QoEProbeLoggerMixin
from qoeprobe.reporting.events import DONE_EVENT, SUMMARY_EVENT, ServerSentEvent

if TYPE_CHECKING:
    from qoeprobe.orchestrator import RunConfig
    from qoeprobe.server.run_service import RunService


@runtime_checkable
class RunTriggerProtocol(Protocol):
    async def trigger(self, config: RunConfig) -> RunOutcome: ...


class InProcessRunTrigger(QoEProbeLoggerMixin):
    """Runs through a ``RunService`` living in the same process."""

    def __init__(self, run_service: RunService) -> None:
        super().__init__()
        self.run_service = run_service

    async def trigger(self, config: RunConfig) -> RunOutcome:
        result = await self.run_service.run(config)
        return result.outcome


class HttpRunTrigger(QoEProbeLoggerMixin):
    """Calls ``GET /run`` on a run server and follows its event stream to ``done``.

    The run's terminal outcome is read from the ``done`` payload.
    """

    def __init__(self, base_url: str, timeout: float | None = None) -> None:
        super().__init__()
        self.run_url = f"{base_url.rstrip('/')}/run"
        self.timeout = timeout

    async def trigger(self, config: RunConfig) -> RunOutcome:
        """Start the run on the server and wait for its terminal outcome.

        Raises:
            RunTriggerFailed: On a non-2xx response or a stream without ``done``
        """
        params = {
            "url": config.url,
            "test": config.test,
            "title": config.title,
            "manual": "1" if config.manual else "0",
        }
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.get(self.run_url, params=params) as response:
                if response.status >= 400:
                    body = await response.text()
                    raise RunTriggerFailed(f"Runner HTTP {response.status}: {body[:200]}")
                return await self._follow_stream(response)

    async def _follow_stream(self, response: aiohttp.ClientResponse) -> RunOutcome:
        lines: list[str] = []
        async for raw in response.content:
            line = raw.decode("utf-8").rstrip("\r\n")
            if line:
                lines.append(line)
                continue
            if not lines:
                continue
            event = ServerSentEvent.decode("\n".join(lines))
            lines.clear()
            if event.event == SUMMARY_EVENT:
                self.debug(f"Run summary: {event.data}")
            elif event.event == DONE_EVENT:
                return RunOutcome(event.data["test_status"])
        raise RunTriggerFailed("Run stream ended before the done event")
