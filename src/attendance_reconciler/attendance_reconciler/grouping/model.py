from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..attendance.model import AttendanceWarning
from ..core.enums import WarningCode
from ..core.exceptions import AmbiguousMatch
from ..scans.model import ScanRecord
from ..schedules.model import ShiftWindow


@dataclass(frozen=True)
class ClaimConflict:
    """A scan that fits several shift windows equally well."""

    scan: ScanRecord
    candidate_dates: tuple[date, ...]
    claimed_by: date

    def to_error(self) -> AmbiguousMatch:
        return AmbiguousMatch(self.scan.scanned_at, self.candidate_dates, self.claimed_by)


@dataclass(frozen=True)
class ShiftInstance:
    """Scans paired to one ShiftWindow (window is None when no schedule applies)."""

    employee_id: int
    reference_date: date
    window: Optional[ShiftWindow]
    time_in: Optional[ScanRecord] = None
    time_out: Optional[ScanRecord] = None
    extra_scans: tuple[ScanRecord, ...] = ()
    conflicts: tuple[ClaimConflict, ...] = ()
    warnings: tuple[AttendanceWarning, ...] = ()

    @property
    def is_rest_day(self) -> bool:
        return self.window is not None and self.window.is_rest_day

    @property
    def scans(self) -> tuple[ScanRecord, ...]:
        bound = [s for s in (self.time_in, self.time_out) if s is not None]
        return tuple(sorted(bound + list(self.extra_scans), key=ScanRecord.sort_key))

    @property
    def has_scans(self) -> bool:
        return bool(self.scans)

    @property
    def is_cross_site(self) -> bool:
        return any(w.code in (WarningCode.CROSS_SITE, WarningCode.CROSS_SITE_CONFLICT) for w in self.warnings)


@dataclass(frozen=True)
class GroupingResult:
    employee_id: int
    instances: tuple[ShiftInstance, ...]
    unmatched: tuple[ScanRecord, ...] = ()
