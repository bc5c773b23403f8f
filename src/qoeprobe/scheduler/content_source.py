# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Resolves the next item to play from the external content source."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any
from urllib.parse import urlencode

import aiohttp
import orjson
from pydantic import ConfigDict, field_validator

from qoeprobe.common.constants import UNTITLED
from qoeprobe.common.environment import Environment
from qoeprobe.common.exceptions import ContentSourceUnreachable
from qoeprobe.common.mixins import QoEProbeLoggerMixin
from qoeprobe.common.models import QoEProbeBaseModel

TITLE_SEPARATOR = " / "


class ContentItem(QoEProbeBaseModel):
    """Content source payload. Only the fields the scheduler uses are kept."""

    model_config = ConfigDict(extra="ignore")

    kinopoisk: str | None = None
    direct: str | None = None
    ru_name: str | None = None
    name: str | None = None

    @field_validator("*", mode="before")
    @classmethod
    def _strings_only(cls, value: Any) -> str | None:
        return value if isinstance(value, str) else None

    @property
    def playable_url(self) -> str | None:
        """Primary URL, falling back to the direct one. None if neither is set."""
        return self.kinopoisk or self.direct or None

    @property
    def title(self) -> str:
        names = [n.strip() for n in (self.ru_name, self.name) if n and n.strip()]
        return TITLE_SEPARATOR.join(names) or UNTITLED


def build_target_url(url: str, *, domain: str, quality: str) -> str:
    """Append the routing tag, autoplay flag and expected quality to ``url``."""
    query = urlencode({"domain": domain, "autoplay": "1", "monq": quality})
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}{query}"


class ContentSourceClient(QoEProbeLoggerMixin):
    """GETs the content source with a bounded timeout and linear backoff.

    Attempt ``i`` (1-based) that fails is followed by a ``base_delay * i`` pause,
    except after the last attempt.
    """

    def __init__(
        self,
        attempts: int | None = None,
        base_delay: float | None = None,
        timeout: float | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        super().__init__()
        settings = Environment.SCHEDULER
        self.attempts = settings.FETCH_ATTEMPTS if attempts is None else attempts
        self.base_delay = settings.FETCH_BASE_DELAY if base_delay is None else base_delay
        self.timeout = settings.FETCH_TIMEOUT if timeout is None else timeout
        self._sleep = sleep

    async def fetch(self, endpoint: str) -> ContentItem:
        """Fetch and parse the next item.

        Raises:
            ContentSourceUnreachable: After every attempt failed
        """
        last_error: BaseException | None = None
        for attempt in range(1, self.attempts + 1):
            try:
                payload = await self._get_json(endpoint)
            except (aiohttp.ClientError, TimeoutError, ValueError) as e:
                last_error = e
                self.warning(
                    f"Content source attempt {attempt}/{self.attempts} failed: {e!r}"
                )
                if attempt < self.attempts:
                    await self._sleep(self.base_delay * attempt)
                continue
            if not isinstance(payload, dict):
                self.warning(f"Content source returned a non-object payload: {payload!r}")
                return ContentItem()
            return ContentItem.model_validate(payload)
        raise ContentSourceUnreachable(endpoint, self.attempts, last_error)

    async def _get_json(self, endpoint: str) -> Any:
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.get(
                endpoint, headers={"Accept": "application/json"}
            ) as response:
                response.raise_for_status()
                body = await response.read()
        return orjson.loads(body)
