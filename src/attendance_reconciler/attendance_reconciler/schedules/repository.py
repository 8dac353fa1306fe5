from __future__ import annotations

from datetime import date
from typing import Mapping, Protocol, Sequence

from .model import ScheduleResolution


class ScheduleProvider(Protocol):
    def resolve_windows(self, *, employee_id: int, start: date, end: date) -> Mapping[date, ScheduleResolution]:
        """One resolution (ShiftWindow, rest-day ShiftWindow or NoSchedule) per date in [start, end]."""

        raise NotImplementedError

    def list_scheduled_employee_ids(self, *, start: date, end: date) -> Sequence[int]:
        """Employees with a schedule in effect somewhere in [start, end]."""

        raise NotImplementedError
