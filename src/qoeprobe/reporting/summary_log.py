# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from pathlib import Path

import orjson

from qoeprobe.orchestrator.models import RunResult


class SummaryLog:
    """Appends one JSON line per finished run. Append-only, no rotation."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def append(self, result: RunResult) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        line = orjson.dumps(
            {
                "summary": result.summary.model_dump(mode="json"),
                "metrics": result.metrics.model_dump(mode="json"),
            }
        )
        with open(self.path, "ab") as f:
            f.write(line + b"\n")
