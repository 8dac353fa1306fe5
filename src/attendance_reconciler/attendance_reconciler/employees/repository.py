from __future__ import annotations

from typing import Protocol, Sequence

from .model import Employee


class EmployeeDirectory(Protocol):
    """Read-only view of the employee directory used for name matching."""

    def list_all(self) -> Sequence[Employee]:
        raise NotImplementedError
