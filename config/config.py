"""Settings shared by every environment.

Environment modules import from here and override what differs.
"""

import os


def _env_int(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


def _env_float(name: str, default: float) -> float:
    return float(os.getenv(name, str(default)))


DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": _env_int("DB_PORT", 3306),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "erp_portal"),
}

# Fixed office shift used to classify biometric attendance
SHIFT_POLICY = {
    "start_time": os.getenv("SHIFT_START", "09:00"),
    "end_time": os.getenv("SHIFT_END", "18:00"),
    "half_day_hours": _env_float("SHIFT_HALF_DAY_HOURS", 4),
    "late_grace_minutes": _env_int("SHIFT_LATE_GRACE_MINUTES", 15),
}

ACTIVITY = {
    "idle_threshold_seconds": _env_int("ACTIVITY_IDLE_THRESHOLD_SECONDS", 5 * 60),
    "active_window_seconds": _env_int("ACTIVITY_ACTIVE_WINDOW_SECONDS", 10 * 60),
}

DEFAULT_PAGE_SIZE = _env_int("DEFAULT_PAGE_SIZE", 20)
MAX_PAGE_SIZE = _env_int("MAX_PAGE_SIZE", 100)

# Applies database/schema.sql on startup (idempotent: CREATE TABLE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
