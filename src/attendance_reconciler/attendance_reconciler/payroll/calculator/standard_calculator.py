from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...common.datetime_utils import floor_minute, minutes_between
from ...schedules.model import ShiftWindow
from .base import PayrollCalculator


class StandardPayrollCalculator(PayrollCalculator):
    """Standard rule: time inside the scheduled window, minus the break on long spans.

    Early arrivals and late departures are not counted (overtime is reported separately).
    """

    def worked_minutes(
        self,
        window: ShiftWindow,
        actual_in: Optional[datetime],
        actual_out: Optional[datetime],
    ) -> Optional[int]:
        if actual_in is None or actual_out is None:
            return None
        start = max(floor_minute(actual_in), window.scheduled_start)
        end = min(floor_minute(actual_out), window.scheduled_end)
        minutes = max(minutes_between(start, end), 0)
        return self._deduct_break(minutes, window.break_minutes)


class UtilityPayrollCalculator(PayrollCalculator):
    """24h utility shifts: first punch to last punch, minus the break on long spans."""

    def worked_minutes(
        self,
        window: ShiftWindow,
        actual_in: Optional[datetime],
        actual_out: Optional[datetime],
    ) -> Optional[int]:
        if actual_in is None or actual_out is None:
            return None
        minutes = max(minutes_between(actual_in, actual_out), 0)
        return self._deduct_break(minutes, window.break_minutes)
