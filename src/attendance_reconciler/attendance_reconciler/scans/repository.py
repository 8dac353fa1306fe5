from __future__ import annotations

from datetime import datetime
from typing import Protocol, Sequence

from .model import ScanRecord


class ScanRecordStore(Protocol):
    """Read-only access to ingested biometric scans.

    Ranges are half-open: start <= scanned_at < end.
    """

    def list_raw_names(self, *, start: datetime, end: datetime) -> Sequence[str]:
        """Distinct device names of scans not yet linked to an employee."""

        raise NotImplementedError

    def list_linked_employee_ids(self, *, start: datetime, end: datetime) -> Sequence[int]:
        raise NotImplementedError

    def list_for_employee(
        self,
        *,
        employee_id: int,
        raw_names: Sequence[str],
        start: datetime,
        end: datetime,
    ) -> Sequence[ScanRecord]:
        """Scans linked to the employee plus unlinked scans under any of raw_names,
        ordered by timestamp."""

        raise NotImplementedError
