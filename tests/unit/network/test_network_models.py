# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import pytest
from pydantic import ValidationError

from qoeprobe.common.enums import NetworkEventType, RequestStatus, ResourceKind
from qoeprobe.network import NetworkObservation, RawNetworkEvent


class TestStreamPayload:
    def test_finished_request(self):
        observation = NetworkObservation(
            request_id="7",
            url="https://cdn/seg.ts",
            kind=ResourceKind.SEGMENT,
            status=RequestStatus.SLOW,
            started_at=1.0,
            ttfb_ms=42.0,
            total_ms=1234.5678,
            bytes=3 * 1024 * 1024,
            mbps=2.123456,
            http_status=200,
        )
        assert observation.to_stream_payload() == {
            "url": "https://cdn/seg.ts",
            "type": "request",
            "kind": "segment",
            "http": 200,
            "status": "SLOW",
            "mbps": 2.1235,
            "size_mb": 3.0,
            "ttfb_ms": 42.0,
            "total_ms": 1234.6,
        }

    def test_failed_request_has_reason_only(self):
        observation = NetworkObservation(
            request_id="8",
            url="https://cdn/index.m3u8",
            kind=ResourceKind.PLAYLIST,
            status=RequestStatus.FAILED,
            started_at=1.0,
            total_ms=10.0,
            reason="net::ERR_CONNECTION_RESET",
        )
        assert observation.to_stream_payload() == {
            "url": "https://cdn/index.m3u8",
            "type": "request",
            "kind": "playlist",
            "status": "FAILED",
            "reason": "net::ERR_CONNECTION_RESET",
        }

    def test_duration_seconds(self):
        observation = NetworkObservation(
            request_id="9",
            url="u.ts",
            kind=ResourceKind.SEGMENT,
            status=RequestStatus.OK,
            started_at=0.0,
            total_ms=250.0,
        )
        assert observation.duration_seconds == 0.25


class TestRawNetworkEvent:
    def test_frozen(self):
        event = RawNetworkEvent(
            type=NetworkEventType.REQUEST_STARTED, request_id="1", timestamp=0.0
        )
        with pytest.raises(ValidationError):
            event.url = "https://cdn/a.ts"

    def test_unknown_fields_rejected(self):
        with pytest.raises(ValidationError):
            RawNetworkEvent(
                type="request-started", request_id="1", timestamp=0.0, bogus=True
            )
