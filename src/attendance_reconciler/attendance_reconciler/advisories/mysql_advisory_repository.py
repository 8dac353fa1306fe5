from __future__ import annotations

from datetime import date
from typing import Mapping

from ..core.enums import AdvisoryKind
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import Advisory
from .repository import AdvisoryProvider

# Lower rank wins when one date carries several advisories.
_PRIORITY = {AdvisoryKind.ON_LEAVE: 0, AdvisoryKind.ADVISED: 1, AdvisoryKind.PRESENT_NO_BIO: 2}


class MySQLAdvisoryProvider(AdvisoryProvider):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_for_employee(self, *, employee_id: int, start: date, end: date) -> Mapping[date, Advisory]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT employee_id, advisory_date, kind, reference
                FROM attendance_advisories
                WHERE employee_id=%s AND advisory_date BETWEEN %s AND %s
                ORDER BY advisory_date ASC, advisory_id ASC
                """,
                (int(employee_id), start, end),
            )
            rows = fetchall(cur)

        out: dict[date, Advisory] = {}
        for r in rows:
            advisory = Advisory(
                employee_id=int(r["employee_id"]),
                advisory_date=r["advisory_date"],
                kind=AdvisoryKind(r["kind"]),
                reference=r.get("reference"),
            )
            current = out.get(advisory.advisory_date)
            if current is None or _PRIORITY[advisory.kind] < _PRIORITY[current.kind]:
                out[advisory.advisory_date] = advisory
        return out
