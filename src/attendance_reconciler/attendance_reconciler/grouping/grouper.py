from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable, Mapping, Optional

from ..attendance.model import AttendanceWarning
from ..common.datetime_utils import iter_dates
from ..core.constants import (
    DEFAULT_CROSS_SITE_TOLERANCE_MINUTES,
    DEFAULT_DOUBLE_PUNCH_MINUTES,
    DEFAULT_LEAD_WINDOW_MINUTES,
    DEFAULT_TAIL_WINDOW_MINUTES,
)
from ..core.enums import WarningCode
from ..scans.model import ScanRecord
from ..schedules.model import ScheduleResolution, ShiftWindow
from .model import ClaimConflict, GroupingResult, ShiftInstance

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GroupingSettings:
    lead_window_minutes: int = DEFAULT_LEAD_WINDOW_MINUTES
    tail_window_minutes: int = DEFAULT_TAIL_WINDOW_MINUTES
    double_punch_minutes: int = DEFAULT_DOUBLE_PUNCH_MINUTES
    cross_site_tolerance_minutes: int = DEFAULT_CROSS_SITE_TOLERANCE_MINUTES


def dedupe_scans(scans: Iterable[ScanRecord]) -> list[ScanRecord]:
    """Sort scans and collapse repeats of the same instant at the same site."""
    result: list[ScanRecord] = []
    seen: set[tuple] = set()
    for scan in sorted(scans, key=ScanRecord.sort_key):
        key = (scan.scanned_at, scan.site_id)
        if key in seen:
            continue
        seen.add(key)
        result.append(scan)
    return result


class ShiftGrouper:
    """Partition one employee's scans into shift instances.

    Each scan goes to the window whose matching interval contains it and whose
    scheduled time-in is nearest. Ties go to the earlier reference date and are
    recorded as a conflict on every candidate instance. Overnight windows keep
    their start date, so a 22:00-06:00 shift and its next-morning time-out form
    a single instance.
    """

    def __init__(self, settings: GroupingSettings | None = None):
        self._settings = settings or GroupingSettings()

    def matching_interval(self, window: ShiftWindow) -> tuple[datetime, datetime]:
        lead = max(int(window.grace_period_minutes), int(self._settings.lead_window_minutes))
        lower = window.scheduled_start - timedelta(minutes=lead)
        upper = window.scheduled_end + timedelta(minutes=int(self._settings.tail_window_minutes))
        return lower, upper

    def group(
        self,
        *,
        employee_id: int,
        scans: Iterable[ScanRecord],
        resolutions: Mapping[date, ScheduleResolution],
        emit_start: date,
        emit_end: date,
    ) -> GroupingResult:
        ordered = dedupe_scans(scans)
        windows = {d: r for d, r in sorted(resolutions.items()) if isinstance(r, ShiftWindow)}
        intervals = {d: self.matching_interval(w) for d, w in windows.items()}

        claimed: dict[date, list[ScanRecord]] = defaultdict(list)
        conflicts: dict[date, list[ClaimConflict]] = defaultdict(list)
        unclaimed: list[ScanRecord] = []

        for scan in ordered:
            candidates = [d for d, (lower, upper) in intervals.items() if lower <= scan.scanned_at <= upper]
            if not candidates:
                unclaimed.append(scan)
                continue

            def distance(d: date) -> float:
                return abs((scan.scanned_at - windows[d].scheduled_start).total_seconds())

            ranked = sorted(candidates, key=lambda d: (distance(d), d))
            winner = ranked[0]
            claimed[winner].append(scan)

            tied = tuple(d for d in ranked if distance(d) == distance(winner))
            if len(tied) > 1:
                conflict = ClaimConflict(scan=scan, candidate_dates=tuple(sorted(tied)), claimed_by=winner)
                for d in tied:
                    conflicts[d].append(conflict)
                logger.debug("Employee %s: ambiguous scan %s between %s", employee_id, scan.record_id, tied)

        instances: list[ShiftInstance] = []
        for day in iter_dates(emit_start, emit_end):
            resolution = resolutions.get(day)
            window = resolution if isinstance(resolution, ShiftWindow) else None
            if window is None:
                same_day = [s for s in unclaimed if s.scan_date == day]
                unclaimed = [s for s in unclaimed if s.scan_date != day]
                instances.append(
                    ShiftInstance(
                        employee_id=employee_id,
                        reference_date=day,
                        window=None,
                        extra_scans=tuple(same_day),
                        conflicts=tuple(conflicts.get(day, ())),
                    )
                )
                continue
            instances.append(self._bind(employee_id, window, claimed.get(day, []), conflicts.get(day, [])))

        unmatched = tuple(s for s in unclaimed if emit_start <= s.scan_date <= emit_end)
        return GroupingResult(employee_id=employee_id, instances=tuple(instances), unmatched=unmatched)

    def _bind(
        self,
        employee_id: int,
        window: ShiftWindow,
        scans: list[ScanRecord],
        conflicts: list[ClaimConflict],
    ) -> ShiftInstance:
        warnings: list[AttendanceWarning] = []
        time_in: Optional[ScanRecord] = None
        time_out: Optional[ScanRecord] = None

        if scans:
            first = scans[0]
            later = [s for s in scans if s.scanned_at > first.scanned_at]
            last = later[-1] if later else None
            after_midpoint = first.scanned_at >= window.midpoint

            if last is None:
                if after_midpoint:
                    time_out = first
                else:
                    time_in = first
            elif (last.scanned_at - first.scanned_at) < timedelta(minutes=int(self._settings.double_punch_minutes)):
                warnings.append(
                    AttendanceWarning(
                        WarningCode.DOUBLE_PUNCH,
                        f"Scans at {first.scanned_at:%H:%M:%S} and {last.scanned_at:%H:%M:%S} are less than "
                        f"{self._settings.double_punch_minutes} minutes apart; kept one punch",
                    )
                )
                if after_midpoint:
                    time_out = last
                else:
                    time_in = first
            else:
                time_in, time_out = first, last

        bound = [s for s in (time_in, time_out) if s is not None]
        extras = tuple(s for s in scans if not any(s is b for b in bound))
        if extras:
            warnings.append(AttendanceWarning(WarningCode.EXTRA_SCANS, f"{len(extras)} extra scan(s) kept for audit"))

        warnings.extend(self._cross_site_warnings(window, time_in, time_out, scans))

        return ShiftInstance(
            employee_id=employee_id,
            reference_date=window.reference_date,
            window=window,
            time_in=time_in,
            time_out=time_out,
            extra_scans=extras,
            conflicts=tuple(conflicts),
            warnings=tuple(warnings),
        )

    def _cross_site_warnings(
        self,
        window: ShiftWindow,
        time_in: Optional[ScanRecord],
        time_out: Optional[ScanRecord],
        scans: list[ScanRecord],
    ) -> list[AttendanceWarning]:
        warnings: list[AttendanceWarning] = []

        if time_in and time_out and None not in (time_in.site_id, time_out.site_id):
            if time_in.site_id != time_out.site_id:
                warnings.append(
                    AttendanceWarning(
                        WarningCode.CROSS_SITE,
                        f"Time-in at site {time_in.site_id}, time-out at site {time_out.site_id}",
                    )
                )

        if window.site_id is not None:
            foreign = sorted(
                {s.site_id for s in (time_in, time_out) if s and s.site_id is not None and s.site_id != window.site_id}
            )
            if foreign:
                warnings.append(
                    AttendanceWarning(
                        WarningCode.CROSS_SITE,
                        f"Punched at site(s) {foreign} instead of assigned site {window.site_id}",
                    )
                )

        tolerance = timedelta(minutes=int(self._settings.cross_site_tolerance_minutes))
        for previous, current in zip(scans, scans[1:]):
            if previous.site_id is None or current.site_id is None or previous.site_id == current.site_id:
                continue
            if current.scanned_at - previous.scanned_at < tolerance:
                warnings.append(
                    AttendanceWarning(
                        WarningCode.CROSS_SITE_CONFLICT,
                        f"Scans at sites {previous.site_id} and {current.site_id} only "
                        f"{current.scanned_at - previous.scanned_at} apart",
                    )
                )
        return warnings
