from __future__ import annotations

from typing import Optional, Sequence

from ...advisories.model import Advisory
from ...core.enums import AttendanceStatus
from ...grouping.model import ShiftInstance
from ..model import AttendanceWarning
from .base import AttendanceStrategy, PunchMetrics, StatusDecision


class ManualReviewStrategy(AttendanceStrategy):
    """Anything a human has to look at. Carries the reasons as warnings."""

    def __init__(self, reasons: Sequence[AttendanceWarning]):
        self._reasons = tuple(reasons)

    @property
    def reasons(self) -> tuple[AttendanceWarning, ...]:
        return self._reasons

    def decide(self, *, instance: ShiftInstance, advisory: Optional[Advisory], metrics: PunchMetrics) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.NEEDS_MANUAL_REVIEW, warnings=self._reasons)
