from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from ...advisories.model import Advisory
from ...core.enums import AttendanceStatus
from ...grouping.model import ShiftInstance
from ..model import AttendanceWarning


@dataclass(frozen=True)
class PunchMetrics:
    """Minute deltas of one instance, already floored to whole minutes."""

    tardy_minutes: int = 0
    undertime_minutes: int = 0
    overtime_minutes: int = 0
    span_minutes: Optional[int] = None
    scheduled_minutes: int = 0


@dataclass(frozen=True)
class StatusDecision:
    status: AttendanceStatus
    secondary: Optional[AttendanceStatus] = None
    warnings: tuple[AttendanceWarning, ...] = ()


class AttendanceStrategy(ABC):
    """Strategy Pattern: encapsulate how we decide an attendance status."""

    @abstractmethod
    def decide(self, *, instance: ShiftInstance, advisory: Optional[Advisory], metrics: PunchMetrics) -> StatusDecision:
        raise NotImplementedError


def undertime_status(undertime_minutes: int, threshold_minutes: int) -> AttendanceStatus:
    if undertime_minutes > threshold_minutes:
        return AttendanceStatus.UNDERTIME_MORE_THAN_HOUR
    return AttendanceStatus.UNDERTIME
