# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from unittest.mock import AsyncMock, patch

import aiohttp
import pytest

from qoeprobe.common.exceptions import ContentSourceUnreachable
from qoeprobe.scheduler import ContentItem, ContentSourceClient, build_target_url

ENDPOINT = "https://content.example/random"


class TestContentItem:
    def test_prefers_primary_url(self):
        item = ContentItem(kinopoisk="https://p/kinopoisk/1", direct="https://p/show/2")
        assert item.playable_url == "https://p/kinopoisk/1"

    def test_falls_back_to_direct(self):
        item = ContentItem.model_validate({"kinopoisk": "", "direct": "https://p/show/2"})
        assert item.playable_url == "https://p/show/2"

    def test_no_url(self):
        assert ContentItem.model_validate({"id": 5}).playable_url is None

    @pytest.mark.parametrize(
        "payload,title",
        [
            ({"ru_name": "Фильм", "name": "Film"}, "Фильм / Film"),
            ({"ru_name": "  ", "name": "Film"}, "Film"),
            ({"ru_name": "Фильм"}, "Фильм"),
            ({}, "Untitled"),
            ({"name": 42}, "Untitled"),
        ],
    )
    def test_title(self, payload, title):
        assert ContentItem.model_validate(payload).title == title


class TestBuildTargetUrl:
    def test_without_query(self):
        assert (
            build_target_url("https://p/show/2", domain="tg.example", quality="720")
            == "https://p/show/2?domain=tg.example&autoplay=1&monq=720"
        )

    def test_with_query(self):
        assert (
            build_target_url("https://p/show/2?lang=ru", domain="d", quality="1080")
            == "https://p/show/2?lang=ru&domain=d&autoplay=1&monq=1080"
        )


class TestContentSourceClient:
    @pytest.mark.asyncio
    async def test_returns_item_on_first_success(self):
        sleep = AsyncMock()
        client = ContentSourceClient(attempts=4, base_delay=1.5, timeout=1, sleep=sleep)
        with patch.object(
            client, "_get_json", AsyncMock(return_value={"direct": "https://p/show/1"})
        ):
            item = await client.fetch(ENDPOINT)

        assert item.playable_url == "https://p/show/1"
        sleep.assert_not_called()

    @pytest.mark.asyncio
    async def test_linear_backoff_then_success(self):
        sleep = AsyncMock()
        client = ContentSourceClient(attempts=4, base_delay=1.5, timeout=1, sleep=sleep)
        get_json = AsyncMock(
            side_effect=[
                aiohttp.ClientConnectionError("refused"),
                TimeoutError(),
                {"kinopoisk": "https://p/kinopoisk/3"},
            ]
        )
        with patch.object(client, "_get_json", get_json):
            item = await client.fetch(ENDPOINT)

        assert item.playable_url == "https://p/kinopoisk/3"
        assert [c.args[0] for c in sleep.await_args_list] == [1.5, 3.0]
        assert get_json.await_count == 3

    @pytest.mark.asyncio
    async def test_gives_up_after_all_attempts(self):
        sleep = AsyncMock()
        client = ContentSourceClient(attempts=4, base_delay=1.5, timeout=1, sleep=sleep)
        error = ValueError("not json")
        with (
            patch.object(client, "_get_json", AsyncMock(side_effect=error)),
            pytest.raises(ContentSourceUnreachable) as exc_info,
        ):
            await client.fetch(ENDPOINT)

        assert exc_info.value.attempts == 4
        assert exc_info.value.last_error is error
        # No pause after the final attempt.
        assert [c.args[0] for c in sleep.await_args_list] == [1.5, 3.0, 4.5]

    @pytest.mark.asyncio
    async def test_non_object_payload_yields_empty_item(self):
        client = ContentSourceClient(attempts=1, sleep=AsyncMock())
        with patch.object(client, "_get_json", AsyncMock(return_value=[1, 2])):
            item = await client.fetch(ENDPOINT)
        assert item.playable_url is None

    def test_defaults_from_environment(self):
        client = ContentSourceClient()
        assert client.attempts == 4
        assert client.base_delay == 1.5
        assert client.timeout == 10.0

    def test_explicit_zero_is_kept(self):
        client = ContentSourceClient(attempts=0, base_delay=0, timeout=0)
        assert client.attempts == 0
        assert client.base_delay == 0
        assert client.timeout == 0
