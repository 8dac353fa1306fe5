from __future__ import annotations

from datetime import date
from typing import Mapping, Protocol

from .model import Advisory


class AdvisoryProvider(Protocol):
    def list_for_employee(self, *, employee_id: int, start: date, end: date) -> Mapping[date, Advisory]:
        raise NotImplementedError


class NoAdvisories(AdvisoryProvider):
    """Provider for deployments without an advisory source."""

    def list_for_employee(self, *, employee_id: int, start: date, end: date) -> Mapping[date, Advisory]:
        return {}
