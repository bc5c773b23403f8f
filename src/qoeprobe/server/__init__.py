# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""FastAPI applications for the run server and the scheduler control API."""

from qoeprobe.server.app import ROOT_BANNER, ProbeServer, create_app
from qoeprobe.server.control import create_control_app, create_control_router
from qoeprobe.server.run_service import RunService, request_process_restart

__all__ = [
    "ProbeServer",
    "ROOT_BANNER",
    "RunService",
    "create_app",
    "create_control_app",
    "create_control_router",
    "request_process_restart",
]
