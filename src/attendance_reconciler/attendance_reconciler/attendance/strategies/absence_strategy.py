from __future__ import annotations

from typing import Optional

from ...advisories.model import Advisory
from ...core.enums import AdvisoryKind, AttendanceStatus
from ...grouping.model import ShiftInstance
from .base import AttendanceStrategy, PunchMetrics, StatusDecision

_ADVISORY_STATUS = {
    AdvisoryKind.ADVISED: AttendanceStatus.ADVISED_ABSENCE,
    AdvisoryKind.ON_LEAVE: AttendanceStatus.ON_LEAVE,
    AdvisoryKind.PRESENT_NO_BIO: AttendanceStatus.PRESENT_NO_BIO,
}


class AbsenceStrategy(AttendanceStrategy):
    """Work day without any punch: NCNS unless an advisory explains it."""

    def decide(self, *, instance: ShiftInstance, advisory: Optional[Advisory], metrics: PunchMetrics) -> StatusDecision:
        if advisory is None:
            return StatusDecision(status=AttendanceStatus.NCNS)
        return StatusDecision(status=_ADVISORY_STATUS[advisory.kind])
