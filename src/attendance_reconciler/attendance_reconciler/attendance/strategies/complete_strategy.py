from __future__ import annotations

from typing import Optional

from ...advisories.model import Advisory
from ...core.constants import DEFAULT_UNDERTIME_THRESHOLD_MINUTES
from ...core.enums import AttendanceStatus
from ...grouping.model import ShiftInstance
from .base import AttendanceStrategy, PunchMetrics, StatusDecision, undertime_status


class CompletePunchStrategy(AttendanceStrategy):
    """Both time-in and time-out present. Tardiness outranks undertime."""

    def __init__(self, *, undertime_threshold_minutes: int = DEFAULT_UNDERTIME_THRESHOLD_MINUTES):
        self._threshold = int(undertime_threshold_minutes)

    def decide(self, *, instance: ShiftInstance, advisory: Optional[Advisory], metrics: PunchMetrics) -> StatusDecision:
        early = None
        if metrics.undertime_minutes > 0:
            early = undertime_status(metrics.undertime_minutes, self._threshold)

        if metrics.tardy_minutes > 0:
            return StatusDecision(status=AttendanceStatus.TARDY, secondary=early)
        if early:
            return StatusDecision(status=early)
        return StatusDecision(status=AttendanceStatus.ON_TIME)
