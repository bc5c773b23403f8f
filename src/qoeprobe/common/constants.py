# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

MILLIS_PER_SECOND = 1_000
MICROS_PER_MILLIS = 1_000
NANOS_PER_MILLIS = 1_000_000
NANOS_PER_SECOND = 1_000_000_000
SECONDS_PER_MINUTE = 60
MILLIS_PER_MINUTE = SECONDS_PER_MINUTE * MILLIS_PER_SECOND

BITS_PER_BYTE = 8
BITS_PER_MEGABIT = 1_000_000
BYTES_PER_MEBIBYTE = 1024 * 1024

DEFAULT_TEST_MINUTES = 5
"""Fallback scheduling duration when the configured test spec has no usable numbers."""

UNKNOWN_FAILURE_REASON = "unknown"
UNTITLED = "Untitled"
