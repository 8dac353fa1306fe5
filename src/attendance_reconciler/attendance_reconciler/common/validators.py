from __future__ import annotations

from datetime import date

from ..core.exceptions import ValidationError


def require_date_range(start: date | None, end: date | None, *, max_days: int) -> tuple[date, date]:
    if start is None or end is None:
        raise ValidationError("Both from and to dates are required")
    if end < start:
        raise ValidationError("The to date must be on or after the from date")
    if (end - start).days + 1 > max_days:
        raise ValidationError(f"Date range may cover at most {max_days} days")
    return start, end


def require_positive_ids(values) -> list[int]:
    out: list[int] = []
    for value in values or []:
        try:
            employee_id = int(value)
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid employee id: {value!r}")
        if employee_id <= 0:
            raise ValidationError(f"Invalid employee id: {value!r}")
        out.append(employee_id)
    return out
