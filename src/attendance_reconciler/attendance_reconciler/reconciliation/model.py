from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import date, datetime
from typing import Any, Mapping, Optional

from ..attendance.factory import AttendanceStrategyFactory
from ..core.constants import (
    DEFAULT_BREAK_THRESHOLD_MINUTES,
    DEFAULT_CROSS_SITE_TOLERANCE_MINUTES,
    DEFAULT_DOUBLE_PUNCH_MINUTES,
    DEFAULT_GRACE_MINUTES,
    DEFAULT_HALF_DAY_RATIO,
    DEFAULT_LEAD_WINDOW_MINUTES,
    DEFAULT_MAX_RANGE_DAYS,
    DEFAULT_MAX_WORKERS,
    DEFAULT_TAIL_WINDOW_MINUTES,
    DEFAULT_UNDERTIME_THRESHOLD_MINUTES,
    DEFAULT_UTILITY_MIN_HOURS,
)
from ..core.enums import ReprocessTrigger
from ..core.exceptions import ValidationError
from ..grouping.grouper import GroupingSettings
from ..scans.model import ScanRecord


@dataclass(frozen=True)
class ReconciliationSettings:
    """Tunables of a reconciliation run (the RECONCILIATION settings dict)."""

    lead_window_minutes: int = DEFAULT_LEAD_WINDOW_MINUTES
    tail_window_minutes: int = DEFAULT_TAIL_WINDOW_MINUTES
    default_grace_minutes: int = DEFAULT_GRACE_MINUTES
    undertime_threshold_minutes: int = DEFAULT_UNDERTIME_THRESHOLD_MINUTES
    half_day_ratio: float = DEFAULT_HALF_DAY_RATIO
    double_punch_minutes: int = DEFAULT_DOUBLE_PUNCH_MINUTES
    cross_site_tolerance_minutes: int = DEFAULT_CROSS_SITE_TOLERANCE_MINUTES
    utility_min_hours: int = DEFAULT_UTILITY_MIN_HOURS
    break_threshold_minutes: int = DEFAULT_BREAK_THRESHOLD_MINUTES
    max_workers: int = DEFAULT_MAX_WORKERS
    max_range_days: int = DEFAULT_MAX_RANGE_DAYS

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "ReconciliationSettings":
        data = dict(data or {})
        known = {f.name: f for f in fields(cls)}
        unknown = sorted(set(data) - set(known))
        if unknown:
            raise ValidationError(f"Unknown reconciliation setting(s): {unknown}")

        values: dict[str, Any] = {}
        for name, value in data.items():
            caster = float if name == "half_day_ratio" else int
            try:
                values[name] = caster(value)
            except (TypeError, ValueError):
                raise ValidationError(f"Invalid value for {name}: {value!r}")
            if values[name] < 0:
                raise ValidationError(f"{name} must not be negative")
        settings = cls(**values)
        if settings.max_workers < 1 or settings.max_range_days < 1:
            raise ValidationError("max_workers and max_range_days must be at least 1")
        return settings

    def grouping_settings(self) -> GroupingSettings:
        return GroupingSettings(
            lead_window_minutes=self.lead_window_minutes,
            tail_window_minutes=self.tail_window_minutes,
            double_punch_minutes=self.double_punch_minutes,
            cross_site_tolerance_minutes=self.cross_site_tolerance_minutes,
        )

    def strategy_factory(self) -> AttendanceStrategyFactory:
        return AttendanceStrategyFactory(
            undertime_threshold_minutes=self.undertime_threshold_minutes,
            half_day_ratio=self.half_day_ratio,
            utility_min_hours=self.utility_min_hours,
        )


@dataclass(frozen=True)
class EmployeeError:
    employee_id: int
    error_type: str
    message: str

    def to_dict(self) -> dict:
        return {"employee_id": self.employee_id, "error_type": self.error_type, "message": self.message}


@dataclass(frozen=True)
class UnmatchedScan:
    """A scan of a processed employee that no shift window claimed."""

    employee_id: int
    record_id: int
    raw_name: str
    scanned_at: datetime
    site_id: Optional[int] = None

    @classmethod
    def of(cls, employee_id: int, scan: ScanRecord) -> "UnmatchedScan":
        return cls(
            employee_id=employee_id,
            record_id=scan.record_id,
            raw_name=scan.raw_name,
            scanned_at=scan.scanned_at,
            site_id=scan.site_id,
        )

    def to_dict(self) -> dict:
        return {
            "employee_id": self.employee_id,
            "record_id": self.record_id,
            "raw_name": self.raw_name,
            "scanned_at": self.scanned_at.isoformat(sep=" "),
            "site_id": self.site_id,
        }


@dataclass(frozen=True)
class EmployeeOutcome:
    """Counts for one employee; merged into the run result."""

    employee_id: int
    created: int = 0
    updated: int = 0
    unchanged: int = 0
    skipped: int = 0
    flagged_for_review: int = 0
    unmatched: tuple[UnmatchedScan, ...] = ()

    @property
    def processed(self) -> int:
        return self.created + self.updated + self.unchanged


@dataclass
class ReconciliationResult:
    start: date
    end: date
    trigger: ReprocessTrigger = ReprocessTrigger.MANUAL
    dry_run: bool = False
    force: bool = False
    processed: int = 0
    created: int = 0
    updated: int = 0
    unchanged: int = 0
    skipped: int = 0
    flagged_for_review: int = 0
    employees_processed: int = 0
    errors: list[EmployeeError] = field(default_factory=list)
    unmatched_scans: list[UnmatchedScan] = field(default_factory=list)
    unresolved_names: list[str] = field(default_factory=list)
    cancelled: bool = False
    pending_employee_ids: list[int] = field(default_factory=list)

    def add(self, outcome: EmployeeOutcome) -> None:
        self.employees_processed += 1
        self.processed += outcome.processed
        self.created += outcome.created
        self.updated += outcome.updated
        self.unchanged += outcome.unchanged
        self.skipped += outcome.skipped
        self.flagged_for_review += outcome.flagged_for_review
        self.unmatched_scans.extend(outcome.unmatched)

    @property
    def succeeded(self) -> bool:
        return not self.errors and not self.cancelled

    def to_dict(self) -> dict:
        return {
            "from": self.start.isoformat(),
            "to": self.end.isoformat(),
            "trigger": self.trigger.value,
            "dry_run": self.dry_run,
            "force": self.force,
            "processed": self.processed,
            "created": self.created,
            "updated": self.updated,
            "unchanged": self.unchanged,
            "skipped": self.skipped,
            "flagged_for_review": self.flagged_for_review,
            "employees_processed": self.employees_processed,
            "errors": [e.to_dict() for e in self.errors],
            "unmatched_scans": [s.to_dict() for s in self.unmatched_scans],
            "unresolved_names": list(self.unresolved_names),
            "cancelled": self.cancelled,
            "pending_employee_ids": list(self.pending_employee_ids),
        }
