from __future__ import annotations

from typing import Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import Employee
from .repository import EmployeeDirectory


class MySQLEmployeeDirectory(EmployeeDirectory):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT employee_id, first_name, middle_name, last_name, is_active
                FROM employees
                ORDER BY employee_id
                """
            )
            rows = fetchall(cur)
            return [
                Employee(
                    employee_id=int(r["employee_id"]),
                    first_name=r["first_name"] or "",
                    middle_name=r.get("middle_name"),
                    last_name=r["last_name"] or "",
                    is_active=bool(r.get("is_active", True)),
                )
                for r in rows
            ]
