from __future__ import annotations

import logging
from datetime import timedelta
from typing import Optional

from ..advisories.model import Advisory
from ..common.datetime_utils import minutes_between
from ..core.enums import AttendanceStatus, ShiftType, WarningCode
from ..grouping.model import ShiftInstance
from ..payroll.calculator.base import PayrollCalculator
from ..payroll.calculator.standard_calculator import StandardPayrollCalculator, UtilityPayrollCalculator
from ..schedules.model import ShiftWindow
from .factory import AttendanceStrategyFactory
from .model import AttendanceDetermination, AttendanceWarning
from .strategies.base import PunchMetrics

logger = logging.getLogger(__name__)


def _unique(warnings) -> tuple[AttendanceWarning, ...]:
    seen = set()
    result = []
    for w in warnings:
        if w in seen:
            continue
        seen.add(w)
        result.append(w)
    return tuple(result)


class AttendanceEvaluator:
    """Pure evaluation of one ShiftInstance into an AttendanceDetermination.

    Never raises: input it cannot make sense of becomes needs_manual_review with a
    MALFORMED_INPUT warning.
    """

    def __init__(
        self,
        *,
        strategy_factory: AttendanceStrategyFactory | None = None,
        standard_calculator: PayrollCalculator | None = None,
        utility_calculator: PayrollCalculator | None = None,
    ):
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._standard_calculator = standard_calculator or StandardPayrollCalculator()
        self._utility_calculator = utility_calculator or UtilityPayrollCalculator()

    def evaluate(self, instance: ShiftInstance, advisory: Optional[Advisory] = None) -> AttendanceDetermination:
        try:
            self._validate(instance, advisory)
            return self._evaluate(instance, advisory)
        except (TypeError, ValueError, AttributeError) as exc:
            logger.warning(
                "Malformed shift instance for employee %s on %s: %s",
                getattr(instance, "employee_id", None),
                getattr(instance, "reference_date", None),
                exc,
            )
            return AttendanceDetermination(
                employee_id=instance.employee_id,
                shift_date=instance.reference_date,
                status=AttendanceStatus.NEEDS_MANUAL_REVIEW,
                warnings=(AttendanceWarning(WarningCode.MALFORMED_INPUT, str(exc)),),
            )

    def metrics(self, window: ShiftWindow, instance: ShiftInstance) -> PunchMetrics:
        actual_in = instance.time_in.scanned_at if instance.time_in else None
        actual_out = instance.time_out.scanned_at if instance.time_out else None
        span = minutes_between(actual_in, actual_out) if actual_in and actual_out else None

        if window.is_rest_day or window.shift_type == ShiftType.UTILITY_24H:
            return PunchMetrics(span_minutes=span, scheduled_minutes=window.duration_minutes)

        tardy = undertime = overtime = 0
        if actual_in is not None:
            allowed = window.scheduled_start + timedelta(minutes=int(window.grace_period_minutes))
            tardy = max(0, minutes_between(allowed, actual_in))
        if actual_out is not None:
            undertime = max(0, minutes_between(actual_out, window.scheduled_end))
            overtime = max(0, minutes_between(window.scheduled_end, actual_out))
        return PunchMetrics(
            tardy_minutes=tardy,
            undertime_minutes=undertime,
            overtime_minutes=overtime,
            span_minutes=span,
            scheduled_minutes=window.duration_minutes,
        )

    def _validate(self, instance: ShiftInstance, advisory: Optional[Advisory]) -> None:
        if instance.time_in and instance.time_out and instance.time_out.scanned_at <= instance.time_in.scanned_at:
            raise ValueError("time-out is not after time-in")
        window = instance.window
        if window is not None:
            if window.reference_date != instance.reference_date:
                raise ValueError(f"window dated {window.reference_date} bound to {instance.reference_date}")
            if int(window.grace_period_minutes) < 0:
                raise ValueError(f"negative grace period {window.grace_period_minutes}")
        if advisory is not None and advisory.advisory_date != instance.reference_date:
            raise ValueError(f"advisory dated {advisory.advisory_date} applied to {instance.reference_date}")

    def _evaluate(self, instance: ShiftInstance, advisory: Optional[Advisory]) -> AttendanceDetermination:
        window = instance.window
        metrics = self.metrics(window, instance) if window is not None else PunchMetrics()

        strategy = self._factory.for_instance(instance=instance, advisory=advisory)
        decision = strategy.decide(instance=instance, advisory=advisory, metrics=metrics)

        worked = None
        if window is not None and not window.is_rest_day and instance.time_in and instance.time_out:
            calculator = (
                self._utility_calculator if window.shift_type == ShiftType.UTILITY_24H else self._standard_calculator
            )
            worked = calculator.worked_minutes(window, instance.time_in.scanned_at, instance.time_out.scanned_at)

        return AttendanceDetermination(
            employee_id=instance.employee_id,
            shift_date=instance.reference_date,
            status=decision.status,
            secondary_status=decision.secondary,
            schedule_id=window.schedule_id if window else None,
            scheduled_time_in=window.scheduled_start if window else None,
            scheduled_time_out=window.scheduled_end if window else None,
            actual_time_in=instance.time_in.scanned_at if instance.time_in else None,
            actual_time_out=instance.time_out.scanned_at if instance.time_out else None,
            bio_in_site_id=instance.time_in.site_id if instance.time_in else None,
            bio_out_site_id=instance.time_out.site_id if instance.time_out else None,
            tardy_minutes=metrics.tardy_minutes,
            undertime_minutes=metrics.undertime_minutes,
            overtime_minutes=metrics.overtime_minutes,
            worked_minutes=worked,
            is_cross_site=instance.is_cross_site,
            is_advised=advisory is not None,
            warnings=_unique(instance.warnings + decision.warnings),
        )
