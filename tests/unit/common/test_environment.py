# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import pytest
from pydantic import ValidationError

from qoeprobe.common.environment import (
    Environment,
    _RunnerSettings,
    _SchedulerSettings,
    _ServiceSettings,
)


class TestEnvironment:
    def test_groups_are_exposed(self):
        assert isinstance(Environment.SERVICE, _ServiceSettings)
        assert isinstance(Environment.RUNNER, _RunnerSettings)
        assert isinstance(Environment.SCHEDULER, _SchedulerSettings)

    def test_defaults(self, monkeypatch):
        for name in ("QOEPROBE_RUNNER_SLOW_THRESHOLD_MBPS", "QOEPROBE_SCHEDULER_TEST"):
            monkeypatch.delenv(name, raising=False)
        runner = _RunnerSettings()
        scheduler = _SchedulerSettings()
        assert runner.SLOW_THRESHOLD_MBPS == 3.0
        assert runner.TOP_N == 5
        assert runner.PLAYER_GLOBAL == "CDNplayer"
        assert scheduler.TEST == "5r5"
        assert scheduler.AD_GAP_SECONDS == 120.0
        assert scheduler.FETCH_ATTEMPTS == 4

    def test_prefixed_env_vars_override(self, monkeypatch):
        monkeypatch.setenv("QOEPROBE_RUNNER_SLOW_THRESHOLD_MBPS", "4.5")
        monkeypatch.setenv("QOEPROBE_SERVICE_PORT", "8080")
        monkeypatch.setenv("QOEPROBE_SCHEDULER_QUALITY", "720")
        assert _RunnerSettings().SLOW_THRESHOLD_MBPS == 4.5
        assert _ServiceSettings().PORT == 8080
        assert _SchedulerSettings().QUALITY == "720"

    def test_invalid_value_rejected(self, monkeypatch):
        monkeypatch.setenv("QOEPROBE_SERVICE_PORT", "70000")
        with pytest.raises(ValidationError):
            _ServiceSettings()
