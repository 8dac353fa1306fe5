"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_GRACE_MINUTES = 15
DEFAULT_LEAD_WINDOW_MINUTES = 120
DEFAULT_TAIL_WINDOW_MINUTES = 240
DEFAULT_UNDERTIME_THRESHOLD_MINUTES = 60
DEFAULT_HALF_DAY_RATIO = 0.5
DEFAULT_DOUBLE_PUNCH_MINUTES = 10
DEFAULT_CROSS_SITE_TOLERANCE_MINUTES = 30
DEFAULT_UTILITY_MIN_HOURS = 8
DEFAULT_BREAK_MINUTES = 60
DEFAULT_BREAK_THRESHOLD_MINUTES = 300
DEFAULT_REPROCESS_DAYS = 7
DEFAULT_MAX_RANGE_DAYS = 366
DEFAULT_MAX_WORKERS = 1

MINUTES_PER_DAY = 24 * 60
