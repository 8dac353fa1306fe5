from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Optional, Union

from ..common.datetime_utils import crosses_midnight, shift_duration_minutes, shift_span
from ..core.constants import DEFAULT_BREAK_MINUTES
from ..core.enums import ShiftType

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


@dataclass(frozen=True)
class ShiftWindow:
    """Expected work period of one employee on one reference date.

    A scheduled_time_out earlier than or equal to scheduled_time_in rolls past
    midnight into reference_date + 1.
    """

    employee_id: int
    reference_date: date
    scheduled_time_in: time
    scheduled_time_out: time
    grace_period_minutes: int
    is_rest_day: bool = False
    schedule_id: Optional[int] = None
    site_id: Optional[int] = None
    shift_type: ShiftType = ShiftType.STANDARD
    break_minutes: int = DEFAULT_BREAK_MINUTES

    @property
    def crosses_midnight(self) -> bool:
        return crosses_midnight(self.scheduled_time_in, self.scheduled_time_out)

    @property
    def scheduled_start(self) -> datetime:
        return shift_span(self.reference_date, self.scheduled_time_in, self.scheduled_time_out)[0]

    @property
    def scheduled_end(self) -> datetime:
        return shift_span(self.reference_date, self.scheduled_time_in, self.scheduled_time_out)[1]

    @property
    def duration_minutes(self) -> int:
        return shift_duration_minutes(self.scheduled_time_in, self.scheduled_time_out)

    @property
    def midpoint(self) -> datetime:
        return self.scheduled_start + timedelta(minutes=self.duration_minutes / 2)


@dataclass(frozen=True)
class NoSchedule:
    """The provider has no schedule in effect for the date."""

    employee_id: int
    reference_date: date


ScheduleResolution = Union[ShiftWindow, NoSchedule]


@dataclass(frozen=True)
class EmployeeSchedule:
    """A schedule definition as stored: times, work days and an effective period."""

    schedule_id: int
    employee_id: int
    scheduled_time_in: time
    scheduled_time_out: time
    work_days: frozenset[str] = field(default_factory=frozenset)
    effective_date: date = date.min
    end_date: Optional[date] = None
    grace_period_minutes: Optional[int] = None
    site_id: Optional[int] = None
    shift_type: ShiftType = ShiftType.STANDARD
    break_minutes: int = DEFAULT_BREAK_MINUTES
    is_active: bool = True

    def covers(self, day: date) -> bool:
        if not self.is_active or day < self.effective_date:
            return False
        return self.end_date is None or day <= self.end_date

    def works_on(self, day: date) -> bool:
        return WEEKDAYS[day.weekday()] in self.work_days

    def window_for(self, day: date, *, default_grace_minutes: int) -> ShiftWindow:
        grace = self.grace_period_minutes
        return ShiftWindow(
            employee_id=self.employee_id,
            reference_date=day,
            scheduled_time_in=self.scheduled_time_in,
            scheduled_time_out=self.scheduled_time_out,
            grace_period_minutes=int(default_grace_minutes if grace is None else grace),
            is_rest_day=not self.works_on(day),
            schedule_id=self.schedule_id,
            site_id=self.site_id,
            shift_type=self.shift_type,
            break_minutes=self.break_minutes,
        )


def parse_work_days(value) -> frozenset[str]:
    """Accept a JSON-ish list, a comma separated string or an iterable of day names."""
    if not value:
        return frozenset()
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    if isinstance(value, str):
        value = value.strip().strip("[]").replace('"', "").replace("'", "").split(",")
    days = {str(v).strip().lower() for v in value if str(v).strip()}
    unknown = days - set(WEEKDAYS)
    if unknown:
        raise ValueError(f"Unknown work day(s): {sorted(unknown)}")
    return frozenset(days)
