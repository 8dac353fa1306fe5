from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.enums import AdvisoryKind


@dataclass(frozen=True)
class Advisory:
    """Externally supplied flag for one employee-date (e.g. a pre-notified absence)."""

    employee_id: int
    advisory_date: date
    kind: AdvisoryKind
    reference: Optional[str] = None
