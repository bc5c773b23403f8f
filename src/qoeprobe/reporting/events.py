# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Server-sent event framing for the live run stream."""

from dataclasses import dataclass
from typing import Any

import orjson

SUMMARY_EVENT = "summary"
DONE_EVENT = "done"

SSE_MEDIA_TYPE = "text/event-stream"
SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


@dataclass(frozen=True, slots=True)
class ServerSentEvent:
    """One event on the stream. Unnamed events carry per-request observations."""

    data: Any
    event: str | None = None

    def encode(self) -> bytes:
        head = f"event: {self.event}\n".encode() if self.event else b""
        return head + b"data: " + orjson.dumps(self.data) + b"\n\n"

    @classmethod
    def decode(cls, frame: str) -> "ServerSentEvent":
        """Parse one frame (the text between blank lines) back into an event."""
        event: str | None = None
        data_lines: list[str] = []
        for line in frame.splitlines():
            if line.startswith("event:"):
                event = line[len("event:") :].strip() or None
            elif line.startswith("data:"):
                data_lines.append(line[len("data:") :].lstrip())
        return cls(data=orjson.loads("\n".join(data_lines)), event=event)
