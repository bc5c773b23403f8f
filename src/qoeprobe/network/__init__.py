# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Network event classification and per-run aggregation."""

from qoeprobe.network.aggregator import RunAggregate
from qoeprobe.network.classifier import NetworkEventClassifier
from qoeprobe.network.models import (
    GroupEntry,
    NetworkObservation,
    RawNetworkEvent,
    RunSummary,
)

__all__ = [
    "GroupEntry",
    "NetworkEventClassifier",
    "NetworkObservation",
    "RawNetworkEvent",
    "RunAggregate",
    "RunSummary",
]
