# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from qoeprobe.instrumentation.protocols import (
    BrowserInstrumentationProtocol,
    NetworkEventSink,
    PageSessionProtocol,
)

__all__ = [
    "BrowserInstrumentationProtocol",
    "NetworkEventSink",
    "PageSessionProtocol",
]
