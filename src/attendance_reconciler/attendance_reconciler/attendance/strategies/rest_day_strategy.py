from __future__ import annotations

from typing import Optional

from ...advisories.model import Advisory
from ...core.enums import AttendanceStatus
from ...grouping.model import ShiftInstance
from .base import AttendanceStrategy, PunchMetrics, StatusDecision


class RestDayStrategy(AttendanceStrategy):
    """Rest day with no scans."""

    def decide(self, *, instance: ShiftInstance, advisory: Optional[Advisory], metrics: PunchMetrics) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.NON_WORK_DAY)
