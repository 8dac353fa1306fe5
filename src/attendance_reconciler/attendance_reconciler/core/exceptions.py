from __future__ import annotations

from datetime import date
from typing import Sequence


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class ReconciliationError(DomainError):
    """Base for per-employee failures collected by the reconciliation run."""


class UnresolvedEmployee(ReconciliationError):
    """A normalized device name matches no employee, or more than one."""

    def __init__(self, raw_name: str, *, candidates: Sequence[int] = ()):
        self.raw_name = raw_name
        self.candidates = tuple(candidates)
        if self.candidates:
            msg = f"Name {raw_name!r} matches several employees: {list(self.candidates)}"
        else:
            msg = f"Name {raw_name!r} matches no employee"
        super().__init__(msg)


class ProtectedRecordSkipped(ReconciliationError):
    """Admin-verified row left untouched. Reported as skipped, never as an error."""

    def __init__(self, employee_id: int, shift_date: date):
        self.employee_id = employee_id
        self.shift_date = shift_date
        super().__init__(f"Attendance of employee {employee_id} on {shift_date.isoformat()} is admin-verified")


class PersistenceConflict(ReconciliationError):
    def __init__(self, employee_id: int, shift_date: date):
        self.employee_id = employee_id
        self.shift_date = shift_date
        super().__init__(
            f"Could not upsert attendance of employee {employee_id} on {shift_date.isoformat()} "
            "after retrying the unique-key conflict"
        )


class NoScheduleDefined(ReconciliationError):
    """No schedule is in effect for the date. Reported as a review warning, processing continues."""

    def __init__(self, employee_id: int, shift_date: date):
        self.employee_id = employee_id
        self.shift_date = shift_date
        super().__init__(f"No schedule defined for employee {employee_id} on {shift_date.isoformat()}")


class AmbiguousMatch(ReconciliationError):
    """A scan fits several shift windows equally well. Reported as a review warning."""

    def __init__(self, scanned_at, candidate_dates: Sequence[date], claimed_by: date):
        self.scanned_at = scanned_at
        self.candidate_dates = tuple(candidate_dates)
        self.claimed_by = claimed_by
        dates = ", ".join(d.isoformat() for d in self.candidate_dates)
        super().__init__(
            f"Scan at {scanned_at:%Y-%m-%d %H:%M:%S} is equally close to the shifts of {dates}; "
            f"provisionally bound to {claimed_by.isoformat()}"
        )
