# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Fakes for the browser instrumentation boundary and raw event builders."""

from collections.abc import Sequence

from qoeprobe.common.enums import NetworkEventType
from qoeprobe.instrumentation import NetworkEventSink
from qoeprobe.network import RawNetworkEvent

PLAYLIST_URL = "https://cdn.example/hls/720.mp4:hls:index.m3u8"


def segment_url(index: int) -> str:
    return f"https://cdn.example/hls/720.mp4:hls:seg-{index}-v1-a1.ts"


def media_request(
    request_id: str,
    url: str,
    *,
    start: float = 0.0,
    seconds: float = 1.0,
    num_bytes: int = 625_000,
    error_text: str | None = None,
) -> list[RawNetworkEvent]:
    """Events of one request: start, headers and finish (or failure)."""
    events = [
        RawNetworkEvent(
            type=NetworkEventType.REQUEST_STARTED,
            request_id=request_id,
            timestamp=start,
            url=url,
        ),
        RawNetworkEvent(
            type=NetworkEventType.RESPONSE_HEADERS,
            request_id=request_id,
            timestamp=start + seconds / 10,
            http_status=200,
        ),
    ]
    if error_text is not None:
        events.append(
            RawNetworkEvent(
                type=NetworkEventType.REQUEST_FAILED,
                request_id=request_id,
                timestamp=start + seconds,
                error_text=error_text,
            )
        )
    else:
        events.append(
            RawNetworkEvent(
                type=NetworkEventType.REQUEST_FINISHED,
                request_id=request_id,
                timestamp=start + seconds,
                encoded_bytes=num_bytes,
            )
        )
    return events


class FakePageSession:
    """Replays canned network events while the page loads."""

    def __init__(
        self,
        events: Sequence[RawNetworkEvent] = (),
        *,
        load_status: int | None = 200,
        load_error: BaseException | None = None,
        player_ready: bool = True,
        seek_result: bool = True,
        seek_error: BaseException | None = None,
    ) -> None:
        self.events = list(events)
        self.load_status = load_status
        self.load_error = load_error
        self.player_ready = player_ready
        self.seek_result = seek_result
        self.seek_error = seek_error
        self.sink: NetworkEventSink | None = None
        self.loaded_url: str | None = None
        self.seek_calls = 0
        self.close_calls = 0

    async def start_capture(self, sink: NetworkEventSink) -> None:
        self.sink = sink

    async def load(self, url: str, timeout: float) -> int | None:
        self.loaded_url = url
        if self.load_error is not None:
            raise self.load_error
        for event in self.events:
            self.sink(event)
        return self.load_status

    async def wait_for_player(self, timeout: float) -> bool:
        return self.player_ready

    async def seek_to_middle(self, timeout: float) -> bool:
        self.seek_calls += 1
        if self.seek_error is not None:
            raise self.seek_error
        return self.seek_result

    async def close(self) -> None:
        self.close_calls += 1


class FakeInstrumentation:
    def __init__(self, session: FakePageSession | None = None) -> None:
        self.session = session or FakePageSession()
        self.open_calls = 0
        self.aclose_calls = 0

    async def open_session(self) -> FakePageSession:
        self.open_calls += 1
        return self.session

    async def aclose(self) -> None:
        self.aclose_calls += 1


