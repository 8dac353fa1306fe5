from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Employee:
    """Domain entity: an employee of the directory.

    Note: Plain data object (no DB access code).
    """

    employee_id: int
    first_name: str
    last_name: str
    middle_name: Optional[str] = None
    is_active: bool = True
