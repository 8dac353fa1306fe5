from __future__ import annotations

from datetime import date
from typing import Iterable

from ..common.datetime_utils import iter_dates
from .model import EmployeeSchedule, NoSchedule, ScheduleResolution


def resolve_schedule_windows(
    schedules: Iterable[EmployeeSchedule],
    *,
    employee_id: int,
    start: date,
    end: date,
    default_grace_minutes: int,
) -> dict[date, ScheduleResolution]:
    """Pick the schedule in effect on each date.

    When several active schedules overlap, the one with the latest
    effective_date wins (then the highest schedule_id).
    """
    ordered = sorted(schedules, key=lambda s: (s.effective_date, s.schedule_id), reverse=True)

    out: dict[date, ScheduleResolution] = {}
    for day in iter_dates(start, end):
        schedule = next((s for s in ordered if s.covers(day)), None)
        if schedule is None:
            out[day] = NoSchedule(employee_id=employee_id, reference_date=day)
        else:
            out[day] = schedule.window_for(day, default_grace_minutes=default_grace_minutes)
    return out
