# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from unittest.mock import AsyncMock, MagicMock

import pytest
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from qoeprobe.common.enums import NetworkEventType
from qoeprobe.common.exceptions import TargetUnavailable
from qoeprobe.instrumentation.playwright_instrumentation import (
    PlaywrightInstrumentation,
    PlaywrightPageSession,
)


class FakeCDPSession:
    def __init__(self) -> None:
        self.handlers: dict[str, object] = {}
        self.send = AsyncMock()
        self.detach = AsyncMock()

    def on(self, name, handler) -> None:
        self.handlers[name] = handler


@pytest.fixture
def cdp():
    return FakeCDPSession()


@pytest.fixture
def page():
    page = MagicMock()
    page.goto = AsyncMock()
    page.wait_for_function = AsyncMock()
    page.evaluate = AsyncMock()
    page.close = AsyncMock()
    return page


@pytest.fixture
def context(cdp):
    context = MagicMock()
    context.new_cdp_session = AsyncMock(return_value=cdp)
    context.close = AsyncMock()
    return context


@pytest.fixture
def session(context, page):
    return PlaywrightPageSession(context, page, "CDNplayer")


class TestPlaywrightPageSessionCapture:
    @pytest.mark.asyncio
    async def test_translates_cdp_events(self, session, cdp):
        events = []
        await session.start_capture(events.append)
        cdp.send.assert_awaited_once_with("Network.enable")

        cdp.handlers["Network.requestWillBeSent"](
            {"requestId": "1", "timestamp": 10.0, "request": {"url": "https://cdn/a.ts"}}
        )
        cdp.handlers["Network.responseReceived"](
            {
                "requestId": "1",
                "timestamp": 10.05,
                "response": {"status": 200, "timing": {"receiveHeadersEnd": 42.5}},
            }
        )
        cdp.handlers["Network.loadingFinished"](
            {"requestId": "1", "timestamp": 11.0, "encodedDataLength": 1000}
        )
        cdp.handlers["Network.loadingFailed"](
            {"requestId": "2", "timestamp": 12.0, "errorText": "net::ERR_ABORTED"}
        )

        assert [e.type for e in events] == [
            NetworkEventType.REQUEST_STARTED,
            NetworkEventType.RESPONSE_HEADERS,
            NetworkEventType.REQUEST_FINISHED,
            NetworkEventType.REQUEST_FAILED,
        ]
        assert events[0].url == "https://cdn/a.ts"
        assert events[1].http_status == 200
        assert events[1].ttfb_ms == 42.5
        assert events[2].encoded_bytes == 1000
        assert events[3].error_text == "net::ERR_ABORTED"

    @pytest.mark.asyncio
    async def test_malformed_event_dropped(self, session, cdp):
        events = []
        await session.start_capture(events.append)

        cdp.handlers["Network.loadingFinished"]({"timestamp": 1.0})

        assert events == []

    @pytest.mark.asyncio
    async def test_no_events_after_close(self, session, cdp):
        events = []
        await session.start_capture(events.append)
        await session.close()

        cdp.handlers["Network.requestWillBeSent"](
            {"requestId": "1", "timestamp": 1.0, "request": {"url": "https://cdn/a.ts"}}
        )

        assert events == []


class TestPlaywrightPageSessionNavigation:
    @pytest.mark.asyncio
    async def test_load_returns_status(self, session, page):
        page.goto.return_value = MagicMock(status=503)
        assert await session.load("https://p/", 5) == 503
        assert page.goto.await_args.kwargs["timeout"] == 5000

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error", [PlaywrightTimeoutError("timeout"), PlaywrightError("net::ERR_NAME")]
    )
    async def test_load_failures_mean_target_unavailable(self, session, page, error):
        page.goto.side_effect = error
        with pytest.raises(TargetUnavailable):
            await session.load("https://p/", 5)

    @pytest.mark.asyncio
    async def test_wait_for_player(self, session, page):
        assert await session.wait_for_player(1) is True
        page.wait_for_function.side_effect = PlaywrightTimeoutError("timeout")
        assert await session.wait_for_player(1) is False

    @pytest.mark.asyncio
    async def test_seek_to_middle(self, session, page):
        page.evaluate.return_value = True
        assert await session.seek_to_middle(1) is True
        assert "CDNplayer" in page.evaluate.await_args.args[0]

        page.evaluate.return_value = False
        assert await session.seek_to_middle(1) is False

    @pytest.mark.asyncio
    async def test_close_is_idempotent_and_tolerant(self, session, page, context, cdp):
        await session.start_capture(lambda event: None)
        page.close.side_effect = PlaywrightError("Target closed")

        await session.close()
        await session.close()

        cdp.detach.assert_awaited_once()
        page.close.assert_awaited_once()
        context.close.assert_awaited_once()


class TestPlaywrightInstrumentation:
    def test_rejects_non_identifier_player_global(self):
        with pytest.raises(ValueError, match="player global"):
            PlaywrightInstrumentation(player_global="window.x; alert(1)")

    @pytest.mark.asyncio
    async def test_reuses_browser_and_closes_it(self, context):
        instrumentation = PlaywrightInstrumentation()
        browser = MagicMock()
        browser.is_connected.return_value = True
        browser.new_context = AsyncMock(return_value=context)
        browser.close = AsyncMock()
        context.new_page = AsyncMock(return_value=MagicMock())
        instrumentation._browser = browser

        first = await instrumentation.open_session()
        second = await instrumentation.open_session()

        assert first is not second
        assert browser.new_context.await_count == 2

        await instrumentation.aclose()
        browser.close.assert_awaited_once()
        assert instrumentation._browser is None
