from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional


@dataclass(frozen=True)
class ScanRecord:
    """Domain entity: one raw biometric punch.

    Immutable once ingested. The core reads scans, it never mutates or deletes them.
    """

    record_id: int
    raw_name: str
    scanned_at: datetime
    site_id: Optional[int] = None
    employee_id: Optional[int] = None

    @property
    def scan_date(self) -> date:
        return self.scanned_at.date()

    def sort_key(self) -> tuple:
        return (self.scanned_at, self.site_id if self.site_id is not None else -1, self.record_id)
