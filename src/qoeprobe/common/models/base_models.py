# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from pydantic import BaseModel, ConfigDict


class QoEProbeBaseModel(BaseModel):
    """Base model for all data exchanged between components.

    Unknown fields are rejected so typos in payloads fail loudly.
    """

    model_config = ConfigDict(extra="forbid", use_enum_values=False)


class FrozenModel(QoEProbeBaseModel):
    """Immutable variant, used for per-run inputs and derived snapshots."""

    model_config = ConfigDict(extra="forbid", frozen=True)
