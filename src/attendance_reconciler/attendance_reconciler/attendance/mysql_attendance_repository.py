from __future__ import annotations

import json
import logging
from datetime import date
from typing import Any, Dict, Mapping, Optional

from mysql.connector import errors as mysql_errors

from ..core.enums import AttendanceStatus, SaveOutcome
from ..core.exceptions import PersistenceConflict, ProtectedRecordSkipped
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AttendanceDetermination, AttendanceRecord, AttendanceWarning
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

_COLUMNS = """
    attendance_id, employee_id, shift_date, schedule_id,
    scheduled_time_in, scheduled_time_out, actual_time_in, actual_time_out,
    status, secondary_status, tardy_minutes, undertime_minutes, overtime_minutes,
    worked_minutes, bio_in_site_id, bio_out_site_id, is_cross_site, is_advised,
    warnings, admin_verified
"""


def _optional_int(value: Any) -> Optional[int]:
    return int(value) if value is not None else None


def _load_warnings(value: Any) -> tuple[AttendanceWarning, ...]:
    if not value:
        return ()
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    data = json.loads(value) if isinstance(value, str) else value
    return tuple(AttendanceWarning.from_dict(item) for item in data)


def _dump_warnings(warnings: tuple[AttendanceWarning, ...]) -> str:
    return json.dumps([w.to_dict() for w in warnings], ensure_ascii=False)


def _to_record(r: Dict[str, Any]) -> AttendanceRecord:
    secondary = r.get("secondary_status")
    determination = AttendanceDetermination(
        employee_id=int(r["employee_id"]),
        shift_date=r["shift_date"],
        status=AttendanceStatus(r["status"]),
        secondary_status=AttendanceStatus(secondary) if secondary else None,
        schedule_id=_optional_int(r.get("schedule_id")),
        scheduled_time_in=r.get("scheduled_time_in"),
        scheduled_time_out=r.get("scheduled_time_out"),
        actual_time_in=r.get("actual_time_in"),
        actual_time_out=r.get("actual_time_out"),
        bio_in_site_id=_optional_int(r.get("bio_in_site_id")),
        bio_out_site_id=_optional_int(r.get("bio_out_site_id")),
        tardy_minutes=int(r.get("tardy_minutes") or 0),
        undertime_minutes=int(r.get("undertime_minutes") or 0),
        overtime_minutes=int(r.get("overtime_minutes") or 0),
        worked_minutes=_optional_int(r.get("worked_minutes")),
        is_cross_site=bool(r.get("is_cross_site")),
        is_advised=bool(r.get("is_advised")),
        warnings=_load_warnings(r.get("warnings")),
    )
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        determination=determination,
        admin_verified=bool(r.get("admin_verified")),
    )


def _params(d: AttendanceDetermination) -> tuple:
    return (
        d.schedule_id,
        d.scheduled_time_in,
        d.scheduled_time_out,
        d.actual_time_in,
        d.actual_time_out,
        d.status.value,
        d.secondary_status.value if d.secondary_status else None,
        int(d.tardy_minutes),
        int(d.undertime_minutes),
        int(d.overtime_minutes),
        d.worked_minutes,
        d.bio_in_site_id,
        d.bio_out_site_id,
        1 if d.is_cross_site else 0,
        1 if d.is_advised else 0,
        _dump_warnings(d.warnings),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_for_employee(self, *, employee_id: int, start: date, end: date) -> Mapping[date, AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendances
                WHERE employee_id=%s AND shift_date BETWEEN %s AND %s
                ORDER BY shift_date
                """,
                (int(employee_id), start, end),
            )
            records = [_to_record(r) for r in fetchall(cur)]
            return {r.shift_date: r for r in records}

    def save_determination(self, determination: AttendanceDetermination, *, force: bool = False) -> SaveOutcome:
        try:
            return self._upsert(determination, force=force)
        except mysql_errors.IntegrityError:
            # Another writer inserted the same key between our read and our insert.
            logger.info(
                "Unique-key conflict on attendance %s/%s, retrying as update",
                determination.employee_id,
                determination.shift_date,
            )
        try:
            return self._upsert(determination, force=force)
        except mysql_errors.IntegrityError as exc:
            raise PersistenceConflict(determination.employee_id, determination.shift_date) from exc

    def _upsert(self, d: AttendanceDetermination, *, force: bool) -> SaveOutcome:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendances WHERE employee_id=%s AND shift_date=%s FOR UPDATE",
                (int(d.employee_id), d.shift_date),
            )
            row = fetchone(cur)
            if row is None:
                cur.execute(
                    """
                    INSERT INTO attendances(
                        employee_id, shift_date, schedule_id,
                        scheduled_time_in, scheduled_time_out, actual_time_in, actual_time_out,
                        status, secondary_status, tardy_minutes, undertime_minutes, overtime_minutes,
                        worked_minutes, bio_in_site_id, bio_out_site_id, is_cross_site, is_advised,
                        warnings, admin_verified
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,0)
                    """,
                    (int(d.employee_id), d.shift_date) + _params(d),
                )
                return SaveOutcome.CREATED

            existing = _to_record(row)
            if existing.admin_verified and not force:
                raise ProtectedRecordSkipped(d.employee_id, d.shift_date)
            if existing.determination == d and not existing.admin_verified:
                return SaveOutcome.UNCHANGED

            cur.execute(
                """
                UPDATE attendances
                SET schedule_id=%s, scheduled_time_in=%s, scheduled_time_out=%s,
                    actual_time_in=%s, actual_time_out=%s, status=%s, secondary_status=%s,
                    tardy_minutes=%s, undertime_minutes=%s, overtime_minutes=%s, worked_minutes=%s,
                    bio_in_site_id=%s, bio_out_site_id=%s, is_cross_site=%s, is_advised=%s,
                    warnings=%s, admin_verified=0, updated_at=CURRENT_TIMESTAMP
                WHERE attendance_id=%s
                """,
                _params(d) + (existing.attendance_id,),
            )
            return SaveOutcome.UPDATED
