# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Browser network instrumentation backed by Playwright and the Chrome DevTools Protocol.

One Chromium instance is launched lazily and shared for the process lifetime.
Every run gets its own incognito context, page and CDP session, all of which are
closed when the run ends.
"""

import asyncio
from typing import Any

from playwright.async_api import (
    Browser,
    BrowserContext,
    CDPSession,
    Page,
    Playwright,
    async_playwright,
)
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from qoeprobe.common.constants import MILLIS_PER_SECOND
from qoeprobe.common.enums import NetworkEventType
from qoeprobe.common.environment import Environment
from qoeprobe.common.exceptions import InstrumentationFailure, TargetUnavailable
from qoeprobe.common.mixins import QoEProbeLoggerMixin
from qoeprobe.instrumentation.protocols import NetworkEventSink
from qoeprobe.network.models import RawNetworkEvent

_SEEK_TO_MIDDLE_SCRIPT = """() => {{
    const player = {player};
    const duration = player && player.api ? player.api("duration") : 0;
    if (duration && duration > 0) {{
        player.api("seek", duration / 2);
        player.api("play");
        return true;
    }}
    return false;
}}"""


class PlaywrightPageSession(QoEProbeLoggerMixin):
    """A page plus the CDP session that reports its network traffic."""

    def __init__(self, context: BrowserContext, page: Page, player_global: str) -> None:
        super().__init__()
        self._context = context
        self._page = page
        self._player_global = player_global
        self._cdp: CDPSession | None = None
        self._sink: NetworkEventSink | None = None
        self._closed = False

    async def start_capture(self, sink: NetworkEventSink) -> None:
        self._sink = sink
        self._cdp = await self._context.new_cdp_session(self._page)
        self._cdp.on("Network.requestWillBeSent", self._on_request_will_be_sent)
        self._cdp.on("Network.responseReceived", self._on_response_received)
        self._cdp.on("Network.loadingFinished", self._on_loading_finished)
        self._cdp.on("Network.loadingFailed", self._on_loading_failed)
        await self._cdp.send("Network.enable")

    def _emit(self, build: Any, params: dict[str, Any]) -> None:
        if self._closed or self._sink is None:
            return
        try:
            event = build(params)
        except Exception as e:
            # Malformed CDP payloads are dropped.
            failure = InstrumentationFailure(f"Unparseable CDP event: {e!r}")
            self.warning(str(failure))
            return
        self._sink(event)

    def _on_request_will_be_sent(self, params: dict[str, Any]) -> None:
        self._emit(
            lambda p: RawNetworkEvent(
                type=NetworkEventType.REQUEST_STARTED,
                request_id=p["requestId"],
                timestamp=p["timestamp"],
                url=(p.get("request") or {}).get("url", ""),
            ),
            params,
        )

    def _on_response_received(self, params: dict[str, Any]) -> None:
        def build(p: dict[str, Any]) -> RawNetworkEvent:
            response = p.get("response") or {}
            timing = response.get("timing") or {}
            return RawNetworkEvent(
                type=NetworkEventType.RESPONSE_HEADERS,
                request_id=p["requestId"],
                timestamp=p["timestamp"],
                http_status=response.get("status"),
                ttfb_ms=timing.get("receiveHeadersEnd"),
            )

        self._emit(build, params)

    def _on_loading_finished(self, params: dict[str, Any]) -> None:
        self._emit(
            lambda p: RawNetworkEvent(
                type=NetworkEventType.REQUEST_FINISHED,
                request_id=p["requestId"],
                timestamp=p["timestamp"],
                encoded_bytes=int(p.get("encodedDataLength") or 0),
            ),
            params,
        )

    def _on_loading_failed(self, params: dict[str, Any]) -> None:
        self._emit(
            lambda p: RawNetworkEvent(
                type=NetworkEventType.REQUEST_FAILED,
                request_id=p["requestId"],
                timestamp=p["timestamp"],
                error_text=p.get("errorText"),
            ),
            params,
        )

    async def load(self, url: str, timeout: float) -> int | None:
        try:
            response = await self._page.goto(
                url, wait_until="domcontentloaded", timeout=timeout * MILLIS_PER_SECOND
            )
        except PlaywrightTimeoutError as e:
            raise TargetUnavailable(f"Timed out after {timeout}s loading {url}") from e
        except PlaywrightError as e:
            raise TargetUnavailable(f"Failed to load {url}: {e.message}") from e
        return response.status if response is not None else None

    async def _wait_for_player_object(self, timeout: float) -> None:
        await self._page.wait_for_function(
            f"typeof {self._player_global} !== 'undefined'",
            timeout=timeout * MILLIS_PER_SECOND,
        )

    async def wait_for_player(self, timeout: float) -> bool:
        try:
            await self._wait_for_player_object(timeout)
        except PlaywrightTimeoutError:
            return False
        return True

    async def seek_to_middle(self, timeout: float) -> bool:
        await self._wait_for_player_object(timeout)
        script = _SEEK_TO_MIDDLE_SCRIPT.format(player=self._player_global)
        return bool(await self._page.evaluate(script))

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._sink = None
        for name, closer in (
            ("CDP session", self._cdp.detach if self._cdp is not None else None),
            ("page", self._page.close),
            ("context", self._context.close),
        ):
            if closer is None:
                continue
            try:
                await closer()
            except PlaywrightError as e:
                self.debug(f"Ignoring error while closing {name}: {e.message}")


class PlaywrightInstrumentation(QoEProbeLoggerMixin):
    """Hands out page sessions from a lazily launched, shared Chromium."""

    def __init__(
        self,
        headless: bool = True,
        browser_args: list[str] | None = None,
        player_global: str = "CDNplayer",
    ) -> None:
        super().__init__()
        if not player_global.isidentifier():
            raise ValueError(
                f"Invalid player global {player_global!r}: must be a JavaScript identifier"
            )
        self.headless = headless
        self.browser_args = list(browser_args or [])
        self.player_global = player_global
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._lock = asyncio.Lock()

    @classmethod
    def from_environment(cls) -> "PlaywrightInstrumentation":
        return cls(
            headless=Environment.RUNNER.HEADLESS,
            browser_args=Environment.RUNNER.BROWSER_ARGS,
            player_global=Environment.RUNNER.PLAYER_GLOBAL,
        )

    async def _get_browser(self) -> Browser:
        async with self._lock:
            if self._browser is None or not self._browser.is_connected():
                if self._playwright is None:
                    self._playwright = await async_playwright().start()
                self.info(f"Launching Chromium (headless={self.headless})")
                self._browser = await self._playwright.chromium.launch(
                    headless=self.headless, args=self.browser_args
                )
            return self._browser

    async def open_session(self) -> PlaywrightPageSession:
        browser = await self._get_browser()
        context = await browser.new_context()
        page = await context.new_page()
        return PlaywrightPageSession(context, page, self.player_global)

    async def aclose(self) -> None:
        async with self._lock:
            if self._browser is not None:
                await self._browser.close()
                self._browser = None
            if self._playwright is not None:
                await self._playwright.stop()
                self._playwright = None
