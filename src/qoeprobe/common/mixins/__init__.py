# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from qoeprobe.common.mixins.health_check_mixin import (
    HealthCheckMixin,
    HealthCheckResult,
)
from qoeprobe.common.mixins.logger_mixin import QoEProbeLoggerMixin

__all__ = ["HealthCheckMixin", "HealthCheckResult", "QoEProbeLoggerMixin"]
