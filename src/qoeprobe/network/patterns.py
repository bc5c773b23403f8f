# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""URL pattern tables used to classify media requests."""

import re

from qoeprobe.common.enums import ResourceKind

MEDIA_URL_PATTERN = re.compile(r"\.(m3u8|mp4|ts)(\?.*)?$", re.IGNORECASE)
"""Only URLs matching this pattern are observed at all."""

PLAYLIST_URL_PATTERN = re.compile(r"\.m3u8(\?|$)", re.IGNORECASE)
SEGMENT_URL_PATTERN = re.compile(r"\.ts(\?|$)", re.IGNORECASE)
PROGRESSIVE_VIDEO_URL_PATTERN = re.compile(r"\.mp4(\?|$)", re.IGNORECASE)

# Checked in order; first match wins.
RESOURCE_KIND_PATTERNS: tuple[tuple[ResourceKind, re.Pattern[str]], ...] = (
    (ResourceKind.PLAYLIST, PLAYLIST_URL_PATTERN),
    (ResourceKind.SEGMENT, SEGMENT_URL_PATTERN),
    (ResourceKind.PROGRESSIVE_VIDEO, PROGRESSIVE_VIDEO_URL_PATTERN),
)

QUALITY_TIERS: tuple[int, ...] = (1080, 720, 480, 360, 240)
QUALITY_URL_PATTERN = re.compile(
    rf"({'|'.join(str(tier) for tier in QUALITY_TIERS)})\.mp4:hls", re.IGNORECASE
)
"""Matches packager URLs such as ``.../720.mp4:hls:seg-3-v1-a1.ts``."""

EXPECTED_QUALITY_QUERY_PARAM = "monq"

KINOPOISK_ID_PATTERN = re.compile(r"kinopoisk/(\d+)")
DIRECT_ID_PATTERN = re.compile(r"show/(\d+)")
