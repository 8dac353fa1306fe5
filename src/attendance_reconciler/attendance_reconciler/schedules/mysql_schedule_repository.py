from __future__ import annotations

from datetime import date
from typing import Mapping, Sequence

from ..core.constants import DEFAULT_BREAK_MINUTES, DEFAULT_GRACE_MINUTES
from ..core.enums import ShiftType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, normalize_mysql_time
from .model import EmployeeSchedule, ScheduleResolution, parse_work_days
from .repository import ScheduleProvider
from .service import resolve_schedule_windows


class MySQLScheduleProvider(ScheduleProvider):
    def __init__(self, conn_factory: DatabaseConnection, *, default_grace_minutes: int = DEFAULT_GRACE_MINUTES):
        self._conn_factory = conn_factory
        self._default_grace_minutes = int(default_grace_minutes)

    def _list_for_employee(self, *, employee_id: int, start: date, end: date) -> Sequence[EmployeeSchedule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT schedule_id, employee_id, site_id, shift_type,
                       scheduled_time_in, scheduled_time_out, work_days,
                       grace_period_minutes, break_minutes, is_active,
                       effective_date, end_date
                FROM employee_schedules
                WHERE employee_id=%s
                  AND is_active=1
                  AND effective_date <= %s
                  AND (end_date IS NULL OR end_date >= %s)
                """,
                (int(employee_id), end, start),
            )
            rows = fetchall(cur)
            return [
                EmployeeSchedule(
                    schedule_id=int(r["schedule_id"]),
                    employee_id=int(r["employee_id"]),
                    scheduled_time_in=normalize_mysql_time(r["scheduled_time_in"]),
                    scheduled_time_out=normalize_mysql_time(r["scheduled_time_out"]),
                    work_days=parse_work_days(r.get("work_days")),
                    effective_date=r["effective_date"],
                    end_date=r.get("end_date"),
                    grace_period_minutes=(
                        int(r["grace_period_minutes"]) if r.get("grace_period_minutes") is not None else None
                    ),
                    site_id=int(r["site_id"]) if r.get("site_id") is not None else None,
                    shift_type=ShiftType(r.get("shift_type") or ShiftType.STANDARD.value),
                    break_minutes=int(r["break_minutes"]) if r.get("break_minutes") is not None else DEFAULT_BREAK_MINUTES,
                    is_active=bool(r.get("is_active", True)),
                )
                for r in rows
            ]

    def resolve_windows(self, *, employee_id: int, start: date, end: date) -> Mapping[date, ScheduleResolution]:
        schedules = self._list_for_employee(employee_id=employee_id, start=start, end=end)
        return resolve_schedule_windows(
            schedules,
            employee_id=employee_id,
            start=start,
            end=end,
            default_grace_minutes=self._default_grace_minutes,
        )

    def list_scheduled_employee_ids(self, *, start: date, end: date) -> Sequence[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT DISTINCT employee_id
                FROM employee_schedules
                WHERE is_active=1
                  AND effective_date <= %s
                  AND (end_date IS NULL OR end_date >= %s)
                ORDER BY employee_id
                """,
                (end, start),
            )
            return [int(r["employee_id"]) for r in fetchall(cur)]
