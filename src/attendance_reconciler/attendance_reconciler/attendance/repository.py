from __future__ import annotations

from datetime import date
from typing import Mapping, Protocol

from ..core.enums import SaveOutcome
from .model import AttendanceDetermination, AttendanceRecord


class AttendanceRepository(Protocol):
    def list_for_employee(self, *, employee_id: int, start: date, end: date) -> Mapping[date, AttendanceRecord]:
        """Stored rows of one employee keyed by shift date, start and end inclusive."""

        raise NotImplementedError

    def save_determination(self, determination: AttendanceDetermination, *, force: bool = False) -> SaveOutcome:
        """Upsert by (employee_id, shift_date).

        Raises ProtectedRecordSkipped when the stored row is admin-verified and force is off
        (checked under the row lock), PersistenceConflict when the unique key keeps colliding.
        A forced write clears admin_verified.
        """

        raise NotImplementedError
