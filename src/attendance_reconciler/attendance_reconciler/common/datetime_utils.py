from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Iterator

from ..core.constants import MINUTES_PER_DAY


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def iter_dates(start: date, end: date) -> Iterator[date]:
    """Yield every date from start to end, both inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def floor_minute(value: datetime) -> datetime:
    return value.replace(second=0, microsecond=0)


def minutes_between(earlier: datetime, later: datetime) -> int:
    """Whole minutes from earlier to later after flooring both to the minute.

    Negative when later is actually before earlier.
    """
    delta = floor_minute(later) - floor_minute(earlier)
    return int(delta.total_seconds() // 60)


def crosses_midnight(time_in: time, time_out: time) -> bool:
    """A time-out earlier than or equal to the time-in rolls into the next day."""
    return time_out <= time_in


def shift_span(reference_date: date, time_in: time, time_out: time) -> tuple[datetime, datetime]:
    """Full scheduled start/end datetimes of a shift attributed to reference_date."""
    start = datetime.combine(reference_date, time_in)
    end = datetime.combine(reference_date, time_out)
    if crosses_midnight(time_in, time_out):
        end += timedelta(days=1)
    return start, end


def shift_duration_minutes(time_in: time, time_out: time) -> int:
    """Scheduled duration modulo 24h (an equal in/out is a full 24h shift)."""
    start = time_in.hour * 60 + time_in.minute
    end = time_out.hour * 60 + time_out.minute
    minutes = (end - start) % MINUTES_PER_DAY
    return minutes or MINUTES_PER_DAY
