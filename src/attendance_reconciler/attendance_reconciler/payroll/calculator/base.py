from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from ...core.constants import DEFAULT_BREAK_THRESHOLD_MINUTES
from ...schedules.model import ShiftWindow


class PayrollCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll)."""

    def __init__(self, *, break_threshold_minutes: int = DEFAULT_BREAK_THRESHOLD_MINUTES):
        self._break_threshold_minutes = int(break_threshold_minutes)

    @abstractmethod
    def worked_minutes(
        self,
        window: ShiftWindow,
        actual_in: Optional[datetime],
        actual_out: Optional[datetime],
    ) -> Optional[int]:
        raise NotImplementedError

    def _deduct_break(self, minutes: int, break_minutes: int) -> int:
        if minutes > self._break_threshold_minutes:
            minutes -= int(break_minutes or 0)
        return max(minutes, 0)
