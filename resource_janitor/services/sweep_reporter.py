# Copyright (c) 2025-2026 OptimNow. All Rights Reserved.
# Licensed under the Apache License, Version 2.0.
# See LICENSE file in the project root for full license information.

"""Rendering of mark-and-sweep outcomes."""

import logging
from typing import Protocol

from ..models import SweepReport

logger = logging.getLogger(__name__)


class SweepReporter(Protocol):
    """Anything that can render a SweepReport."""

    def report(self, report: SweepReport) -> None: ...


class LoggingSweepReporter:
    """
    Reports sweep outcomes through the standard logging module.

    Forgotten keys are logged one by one at DEBUG. Swept keys are summarized
    once at WARNING so operators see every deletion candidate of the run.
    """

    def __init__(self, log: logging.Logger | None = None):
        self._logger = log or logger

    def report(self, report: SweepReport) -> None:
        for key in report.forgotten:
            self._logger.debug("%s: deleted since last run", key)

        if report.swept:
            self._logger.warning("%d resources swept: %s", len(report.swept), report.swept)
