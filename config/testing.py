import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendance_leave_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")

# Tests run against the in-process store
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "memory")

AUTO_INIT_DB = False
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "1")))

TIMEZONE = ""
LATE_THRESHOLD = "09:30"
HALF_DAY_HOURS = "4"
LEAVE_CHECKIN_POLICY = "reject"
APPROVE_PAST_LEAVES = True
REJECT_OVERLAPPING_LEAVES = False
