from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional

from .advisories.mysql_advisory_repository import MySQLAdvisoryProvider
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeDirectory
from .reconciliation.model import ReconciliationSettings
from .reconciliation.service import ReconciliationProcessor
from .scans.mysql_scan_repository import MySQLScanRecordStore
from .schedules.mysql_schedule_repository import MySQLScheduleProvider


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection
    settings: ReconciliationSettings

    employees_repo: MySQLEmployeeDirectory
    scans_repo: MySQLScanRecordStore
    schedules_repo: MySQLScheduleProvider
    advisories_repo: MySQLAdvisoryProvider
    attendance_repo: MySQLAttendanceRepository

    reconciliation_processor: ReconciliationProcessor


def build_container(*, db_config: dict, reconciliation: Optional[Mapping] = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    settings = ReconciliationSettings.from_dict(reconciliation)

    employees_repo = MySQLEmployeeDirectory(conn)
    scans_repo = MySQLScanRecordStore(conn)
    schedules_repo = MySQLScheduleProvider(conn, default_grace_minutes=settings.default_grace_minutes)
    advisories_repo = MySQLAdvisoryProvider(conn)
    attendance_repo = MySQLAttendanceRepository(conn)

    reconciliation_processor = ReconciliationProcessor(
        scans=scans_repo,
        schedules=schedules_repo,
        attendance=attendance_repo,
        employees=employees_repo,
        advisories=advisories_repo,
        settings=settings,
    )

    return Container(
        conn=conn,
        settings=settings,
        employees_repo=employees_repo,
        scans_repo=scans_repo,
        schedules_repo=schedules_repo,
        advisories_repo=advisories_repo,
        attendance_repo=attendance_repo,
        reconciliation_processor=reconciliation_processor,
    )
