from __future__ import annotations

from typing import Optional

from ...advisories.model import Advisory
from ...core.constants import DEFAULT_HALF_DAY_RATIO, DEFAULT_UNDERTIME_THRESHOLD_MINUTES
from ...core.enums import AttendanceStatus
from ...grouping.model import ShiftInstance
from .base import AttendanceStrategy, PunchMetrics, StatusDecision, undertime_status


class _MissingPunchStrategy(AttendanceStrategy):
    def __init__(
        self,
        *,
        half_day_ratio: float = DEFAULT_HALF_DAY_RATIO,
        undertime_threshold_minutes: int = DEFAULT_UNDERTIME_THRESHOLD_MINUTES,
    ):
        self._half_day_ratio = float(half_day_ratio)
        self._threshold = int(undertime_threshold_minutes)

    def _exceeds_half_day(self, minutes: int, metrics: PunchMetrics) -> bool:
        return minutes > metrics.scheduled_minutes * self._half_day_ratio


class MissingTimeOutStrategy(_MissingPunchStrategy):
    """Only a time-in: half-day absence when the arrival was past the half-shift mark."""

    def decide(self, *, instance: ShiftInstance, advisory: Optional[Advisory], metrics: PunchMetrics) -> StatusDecision:
        if self._exceeds_half_day(metrics.tardy_minutes, metrics):
            return StatusDecision(status=AttendanceStatus.HALF_DAY_ABSENCE)
        secondary = AttendanceStatus.TARDY if metrics.tardy_minutes > 0 else None
        return StatusDecision(status=AttendanceStatus.FAILED_BIO_OUT, secondary=secondary)


class MissingTimeInStrategy(_MissingPunchStrategy):
    """Only a time-out: half-day absence when the departure was before the half-shift mark."""

    def decide(self, *, instance: ShiftInstance, advisory: Optional[Advisory], metrics: PunchMetrics) -> StatusDecision:
        if self._exceeds_half_day(metrics.undertime_minutes, metrics):
            return StatusDecision(status=AttendanceStatus.HALF_DAY_ABSENCE)
        secondary = None
        if metrics.undertime_minutes > 0:
            secondary = undertime_status(metrics.undertime_minutes, self._threshold)
        return StatusDecision(status=AttendanceStatus.FAILED_BIO_IN, secondary=secondary)
