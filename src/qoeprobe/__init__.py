# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""QoE Probe - browser-driven video delivery measurement."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("qoeprobe")
except PackageNotFoundError:
    __version__ = "unknown"
