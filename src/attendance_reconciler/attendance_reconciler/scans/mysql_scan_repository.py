from __future__ import annotations

from datetime import datetime
from typing import Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, in_clause
from .model import ScanRecord
from .repository import ScanRecordStore


class MySQLScanRecordStore(ScanRecordStore):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_raw_names(self, *, start: datetime, end: datetime) -> Sequence[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT DISTINCT employee_name
                FROM biometric_records
                WHERE employee_id IS NULL AND scanned_at >= %s AND scanned_at < %s
                ORDER BY employee_name
                """,
                (start, end),
            )
            return [r["employee_name"] for r in fetchall(cur)]

    def list_linked_employee_ids(self, *, start: datetime, end: datetime) -> Sequence[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT DISTINCT employee_id
                FROM biometric_records
                WHERE employee_id IS NOT NULL AND scanned_at >= %s AND scanned_at < %s
                ORDER BY employee_id
                """,
                (start, end),
            )
            return [int(r["employee_id"]) for r in fetchall(cur)]

    def list_for_employee(
        self,
        *,
        employee_id: int,
        raw_names: Sequence[str],
        start: datetime,
        end: datetime,
    ) -> Sequence[ScanRecord]:
        clauses = ["employee_id=%s"]
        params: list[object] = [int(employee_id)]
        if raw_names:
            clauses.append(f"(employee_id IS NULL AND employee_name IN ({in_clause(raw_names)}))")
            params.extend(raw_names)

        where = " OR ".join(clauses)
        params.extend([start, end])

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT record_id, employee_id, employee_name, site_id, scanned_at
                FROM biometric_records
                WHERE ({where}) AND scanned_at >= %s AND scanned_at < %s
                ORDER BY scanned_at ASC, record_id ASC
                """,
                tuple(params),
            )
            rows = fetchall(cur)
            return [
                ScanRecord(
                    record_id=int(r["record_id"]),
                    raw_name=r["employee_name"],
                    scanned_at=r["scanned_at"],
                    site_id=int(r["site_id"]) if r.get("site_id") is not None else None,
                    employee_id=int(r["employee_id"]) if r.get("employee_id") is not None else None,
                )
                for r in rows
            ]
