from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..advisories.model import Advisory
from ..core.constants import (
    DEFAULT_HALF_DAY_RATIO,
    DEFAULT_UNDERTIME_THRESHOLD_MINUTES,
    DEFAULT_UTILITY_MIN_HOURS,
)
from ..core.enums import AdvisoryKind, ShiftType, WarningCode
from ..core.exceptions import NoScheduleDefined
from ..grouping.model import ShiftInstance
from .model import AttendanceWarning
from .strategies.absence_strategy import AbsenceStrategy
from .strategies.base import AttendanceStrategy
from .strategies.complete_strategy import CompletePunchStrategy
from .strategies.missing_punch_strategy import MissingTimeInStrategy, MissingTimeOutStrategy
from .strategies.rest_day_strategy import RestDayStrategy
from .strategies.review_strategy import ManualReviewStrategy
from .strategies.utility_strategy import UtilityShiftStrategy


def review_reasons(instance: ShiftInstance, advisory: Optional[Advisory]) -> list[AttendanceWarning]:
    """Why an instance cannot be decided automatically (empty when it can)."""
    reasons: list[AttendanceWarning] = []
    if instance.window is None:
        error = NoScheduleDefined(instance.employee_id, instance.reference_date)
        reasons.append(AttendanceWarning(WarningCode.NO_SCHEDULE, str(error)))

    for conflict in instance.conflicts:
        reasons.append(AttendanceWarning(WarningCode.AMBIGUOUS_MATCH, str(conflict.to_error())))

    reasons.extend(w for w in instance.warnings if w.code == WarningCode.CROSS_SITE_CONFLICT)

    if instance.is_rest_day and instance.has_scans:
        reasons.append(
            AttendanceWarning(
                WarningCode.WORKED_REST_DAY,
                f"{len(instance.scans)} scan(s) on rest day {instance.reference_date.isoformat()}",
            )
        )

    if advisory is not None and advisory.kind == AdvisoryKind.ON_LEAVE and instance.has_scans:
        reasons.append(
            AttendanceWarning(
                WarningCode.LEAVE_CONFLICT,
                f"Approved leave on {instance.reference_date.isoformat()} but {len(instance.scans)} scan(s) recorded",
            )
        )
    return reasons


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on the shape of the instance."""

    undertime_threshold_minutes: int = DEFAULT_UNDERTIME_THRESHOLD_MINUTES
    half_day_ratio: float = DEFAULT_HALF_DAY_RATIO
    utility_min_hours: int = DEFAULT_UTILITY_MIN_HOURS

    def for_instance(self, *, instance: ShiftInstance, advisory: Optional[Advisory]) -> AttendanceStrategy:
        reasons = review_reasons(instance, advisory)
        if reasons:
            return ManualReviewStrategy(reasons)

        if instance.is_rest_day:
            return RestDayStrategy()

        if instance.time_in is None and instance.time_out is None:
            return AbsenceStrategy()

        if instance.time_in and instance.time_out:
            if instance.window.shift_type == ShiftType.UTILITY_24H:
                return UtilityShiftStrategy(min_hours=self.utility_min_hours)
            return CompletePunchStrategy(undertime_threshold_minutes=self.undertime_threshold_minutes)

        if instance.time_in:
            return MissingTimeOutStrategy(
                half_day_ratio=self.half_day_ratio,
                undertime_threshold_minutes=self.undertime_threshold_minutes,
            )
        return MissingTimeInStrategy(
            half_day_ratio=self.half_day_ratio,
            undertime_threshold_minutes=self.undertime_threshold_minutes,
        )
