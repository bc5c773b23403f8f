# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from qoeprobe.common.models.base_models import FrozenModel, QoEProbeBaseModel

__all__ = ["FrozenModel", "QoEProbeBaseModel"]
