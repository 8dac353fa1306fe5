from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus, WarningCode


@dataclass(frozen=True)
class AttendanceWarning:
    code: WarningCode
    message: str

    def to_dict(self) -> dict:
        return {"code": self.code.value, "message": self.message}

    @classmethod
    def from_dict(cls, data: dict) -> "AttendanceWarning":
        return cls(code=WarningCode(data["code"]), message=str(data.get("message") or ""))


@dataclass(frozen=True)
class AttendanceDetermination:
    """Computed attendance of one employee for one shift date.

    shift_date is the date the shift started (overnight shifts keep their start date).
    """

    employee_id: int
    shift_date: date
    status: AttendanceStatus
    secondary_status: Optional[AttendanceStatus] = None
    schedule_id: Optional[int] = None
    scheduled_time_in: Optional[datetime] = None
    scheduled_time_out: Optional[datetime] = None
    actual_time_in: Optional[datetime] = None
    actual_time_out: Optional[datetime] = None
    bio_in_site_id: Optional[int] = None
    bio_out_site_id: Optional[int] = None
    tardy_minutes: int = 0
    undertime_minutes: int = 0
    overtime_minutes: int = 0
    worked_minutes: Optional[int] = None
    is_cross_site: bool = False
    is_advised: bool = False
    warnings: tuple[AttendanceWarning, ...] = ()

    @property
    def key(self) -> tuple[int, date]:
        return (self.employee_id, self.shift_date)


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: a stored attendance row (unique per employee and shift date)."""

    attendance_id: int
    determination: AttendanceDetermination
    admin_verified: bool = False

    @property
    def employee_id(self) -> int:
        return self.determination.employee_id

    @property
    def shift_date(self) -> date:
        return self.determination.shift_date

    @property
    def status(self) -> AttendanceStatus:
        return self.determination.status
