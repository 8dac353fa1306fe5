import os

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendance_db"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

RECONCILIATION = {
    "lead_window_minutes": int(os.getenv("RECON_LEAD_WINDOW_MINUTES", "120")),
    "tail_window_minutes": int(os.getenv("RECON_TAIL_WINDOW_MINUTES", "240")),
    "default_grace_minutes": int(os.getenv("RECON_DEFAULT_GRACE_MINUTES", "15")),
    "undertime_threshold_minutes": int(os.getenv("RECON_UNDERTIME_THRESHOLD_MINUTES", "60")),
    "half_day_ratio": float(os.getenv("RECON_HALF_DAY_RATIO", "0.5")),
    "double_punch_minutes": int(os.getenv("RECON_DOUBLE_PUNCH_MINUTES", "10")),
    "cross_site_tolerance_minutes": int(os.getenv("RECON_CROSS_SITE_TOLERANCE_MINUTES", "30")),
    "utility_min_hours": int(os.getenv("RECON_UTILITY_MIN_HOURS", "8")),
    "break_threshold_minutes": int(os.getenv("RECON_BREAK_THRESHOLD_MINUTES", "300")),
    "max_workers": int(os.getenv("RECON_MAX_WORKERS", "1")),
    "max_range_days": int(os.getenv("RECON_MAX_RANGE_DAYS", "366")),
}
