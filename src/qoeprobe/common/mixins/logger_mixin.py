# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import logging

from qoeprobe.common.logging import NOTICE, TRACE


class QoEProbeLoggerMixin:
    """Gives a class ``self.debug(...)``-style logging bound to its module logger.

    Subclasses may pass ``logger_name`` to log under a different name.
    """

    def __init__(self, logger_name: str | None = None, **kwargs) -> None:
        super().__init__(**kwargs)
        self.logger = logging.getLogger(logger_name or self.__class__.__module__)

    @property
    def is_trace_enabled(self) -> bool:
        return self.logger.isEnabledFor(TRACE)

    @property
    def is_debug_enabled(self) -> bool:
        return self.logger.isEnabledFor(logging.DEBUG)

    def trace(self, message: str) -> None:
        self.logger.log(TRACE, message)

    def debug(self, message: str) -> None:
        self.logger.debug(message)

    def info(self, message: str) -> None:
        self.logger.info(message)

    def notice(self, message: str) -> None:
        self.logger.log(NOTICE, message)

    def warning(self, message: str) -> None:
        self.logger.warning(message)

    def error(self, message: str) -> None:
        self.logger.error(message)

    def exception(self, message: str) -> None:
        self.logger.exception(message)
