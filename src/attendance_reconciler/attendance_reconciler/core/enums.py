from __future__ import annotations

from enum import Enum


class AttendanceStatus(str, Enum):
    """Attendance status stored in the database."""

    ON_TIME = "on_time"
    TARDY = "tardy"
    UNDERTIME = "undertime"
    UNDERTIME_MORE_THAN_HOUR = "undertime_more_than_hour"
    HALF_DAY_ABSENCE = "half_day_absence"
    FAILED_BIO_IN = "failed_bio_in"
    FAILED_BIO_OUT = "failed_bio_out"
    NCNS = "ncns"
    ADVISED_ABSENCE = "advised_absence"
    ON_LEAVE = "on_leave"
    PRESENT_NO_BIO = "present_no_bio"
    NON_WORK_DAY = "non_work_day"
    NEEDS_MANUAL_REVIEW = "needs_manual_review"


class ShiftType(str, Enum):
    STANDARD = "standard"
    UTILITY_24H = "utility_24h"


class AdvisoryKind(str, Enum):
    """Externally supplied flag for a date (pre-notified absence, leave, ...)."""

    ADVISED = "advised"
    ON_LEAVE = "on_leave"
    PRESENT_NO_BIO = "present_no_bio"


class WarningCode(str, Enum):
    AMBIGUOUS_MATCH = "AMBIGUOUS_MATCH"
    NO_SCHEDULE = "NO_SCHEDULE"
    WORKED_REST_DAY = "WORKED_REST_DAY"
    CROSS_SITE = "CROSS_SITE"
    CROSS_SITE_CONFLICT = "CROSS_SITE_CONFLICT"
    DOUBLE_PUNCH = "DOUBLE_PUNCH"
    EXTRA_SCANS = "EXTRA_SCANS"
    LEAVE_CONFLICT = "LEAVE_CONFLICT"
    UTILITY_SHORT_HOURS = "UTILITY_SHORT_HOURS"
    MALFORMED_INPUT = "MALFORMED_INPUT"


class SaveOutcome(str, Enum):
    """What the attendance repository did with a determination."""

    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"


class ReprocessTrigger(str, Enum):
    MANUAL = "manual"
    UPLOAD = "upload"
