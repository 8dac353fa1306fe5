from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Mapping, Sequence

import pytest

from src.attendance_reconciler.attendance_reconciler.advisories.model import Advisory
from src.attendance_reconciler.attendance_reconciler.attendance.model import (
    AttendanceDetermination,
    AttendanceRecord,
)
from src.attendance_reconciler.attendance_reconciler.core.enums import SaveOutcome
from src.attendance_reconciler.attendance_reconciler.core.exceptions import ProtectedRecordSkipped
from src.attendance_reconciler.attendance_reconciler.employees.model import Employee
from src.attendance_reconciler.attendance_reconciler.reconciliation.model import ReconciliationSettings
from src.attendance_reconciler.attendance_reconciler.reconciliation.service import ReconciliationProcessor
from src.attendance_reconciler.attendance_reconciler.scans.model import ScanRecord
from src.attendance_reconciler.attendance_reconciler.schedules.model import EmployeeSchedule
from src.attendance_reconciler.attendance_reconciler.schedules.service import resolve_schedule_windows


@dataclass
class InMemoryEmployees:
    employees: list[Employee] = field(default_factory=list)

    def list_all(self) -> Sequence[Employee]:
        return list(self.employees)


@dataclass
class InMemoryScans:
    records: list[ScanRecord] = field(default_factory=list)

    def add(self, raw_name: str, scanned_at: datetime, *, site_id=None, employee_id=None) -> ScanRecord:
        record = ScanRecord(
            record_id=len(self.records) + 1,
            raw_name=raw_name,
            scanned_at=scanned_at,
            site_id=site_id,
            employee_id=employee_id,
        )
        self.records.append(record)
        return record

    def _in_range(self, start: datetime, end: datetime):
        return [r for r in self.records if start <= r.scanned_at < end]

    def list_raw_names(self, *, start: datetime, end: datetime) -> Sequence[str]:
        return sorted({r.raw_name for r in self._in_range(start, end) if r.employee_id is None})

    def list_linked_employee_ids(self, *, start: datetime, end: datetime) -> Sequence[int]:
        return sorted({r.employee_id for r in self._in_range(start, end) if r.employee_id is not None})

    def list_for_employee(self, *, employee_id: int, raw_names: Sequence[str], start: datetime, end: datetime):
        out = [
            r
            for r in self._in_range(start, end)
            if r.employee_id == employee_id or (r.employee_id is None and r.raw_name in raw_names)
        ]
        return sorted(out, key=lambda r: (r.scanned_at, r.record_id))


@dataclass
class InMemorySchedules:
    schedules: list[EmployeeSchedule] = field(default_factory=list)
    default_grace_minutes: int = 15

    def resolve_windows(self, *, employee_id: int, start: date, end: date):
        return resolve_schedule_windows(
            [s for s in self.schedules if s.employee_id == employee_id],
            employee_id=employee_id,
            start=start,
            end=end,
            default_grace_minutes=self.default_grace_minutes,
        )

    def list_scheduled_employee_ids(self, *, start: date, end: date) -> Sequence[int]:
        ids = {
            s.employee_id
            for s in self.schedules
            if s.is_active and s.effective_date <= end and (s.end_date is None or s.end_date >= start)
        }
        return sorted(ids)


@dataclass
class InMemoryAdvisories:
    advisories: list[Advisory] = field(default_factory=list)

    def list_for_employee(self, *, employee_id: int, start: date, end: date) -> Mapping[date, Advisory]:
        return {
            a.advisory_date: a
            for a in self.advisories
            if a.employee_id == employee_id and start <= a.advisory_date <= end
        }


class InMemoryAttendance:
    def __init__(self):
        self.rows: dict[tuple[int, date], AttendanceRecord] = {}
        self.writes = 0
        self.failing_employee_ids: set[int] = set()
        self._id = 0

    def list_for_employee(self, *, employee_id: int, start: date, end: date) -> Mapping[date, AttendanceRecord]:
        if employee_id in self.failing_employee_ids:
            raise RuntimeError(f"storage unavailable for employee {employee_id}")
        return {d: r for (e, d), r in self.rows.items() if e == employee_id and start <= d <= end}

    def save_determination(self, determination: AttendanceDetermination, *, force: bool = False) -> SaveOutcome:
        current = self.rows.get(determination.key)
        if current is None:
            self._id += 1
            self.rows[determination.key] = AttendanceRecord(attendance_id=self._id, determination=determination)
            self.writes += 1
            return SaveOutcome.CREATED
        if current.admin_verified and not force:
            raise ProtectedRecordSkipped(determination.employee_id, determination.shift_date)
        if current.determination == determination and not current.admin_verified:
            return SaveOutcome.UNCHANGED
        self.rows[determination.key] = AttendanceRecord(
            attendance_id=current.attendance_id, determination=determination, admin_verified=False
        )
        self.writes += 1
        return SaveOutcome.UPDATED

    def verify(self, employee_id: int, shift_date: date) -> None:
        self.rows[(employee_id, shift_date)] = replace(self.rows[(employee_id, shift_date)], admin_verified=True)


@dataclass
class World:
    employees: InMemoryEmployees = field(default_factory=InMemoryEmployees)
    scans: InMemoryScans = field(default_factory=InMemoryScans)
    schedules: InMemorySchedules = field(default_factory=InMemorySchedules)
    advisories: InMemoryAdvisories = field(default_factory=InMemoryAdvisories)
    attendance: InMemoryAttendance = field(default_factory=InMemoryAttendance)

    def processor(self, **settings) -> ReconciliationProcessor:
        return ReconciliationProcessor(
            scans=self.scans,
            schedules=self.schedules,
            attendance=self.attendance,
            employees=self.employees,
            advisories=self.advisories,
            settings=ReconciliationSettings.from_dict(settings),
        )


@pytest.fixture
def world() -> World:
    return World()
