from __future__ import annotations

from typing import Optional

from ...advisories.model import Advisory
from ...core.constants import DEFAULT_UTILITY_MIN_HOURS
from ...core.enums import AttendanceStatus, WarningCode
from ...grouping.model import ShiftInstance
from ..model import AttendanceWarning
from .base import AttendanceStrategy, PunchMetrics, StatusDecision


class UtilityShiftStrategy(AttendanceStrategy):
    """24h utility shift: only the hours between first and last punch matter."""

    def __init__(self, *, min_hours: int = DEFAULT_UTILITY_MIN_HOURS):
        self._min_minutes = int(min_hours) * 60

    def decide(self, *, instance: ShiftInstance, advisory: Optional[Advisory], metrics: PunchMetrics) -> StatusDecision:
        span = metrics.span_minutes or 0
        if span >= self._min_minutes:
            return StatusDecision(status=AttendanceStatus.ON_TIME)
        warning = AttendanceWarning(
            WarningCode.UTILITY_SHORT_HOURS,
            f"Only {span // 60}h{span % 60:02d} between punches, {self._min_minutes // 60}h required",
        )
        return StatusDecision(status=AttendanceStatus.UNDERTIME, warnings=(warning,))
