import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendance_leave"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "mysql")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

TIMEZONE = os.getenv("TIMEZONE", "")
LATE_THRESHOLD = os.getenv("LATE_THRESHOLD", "09:30")
HALF_DAY_HOURS = os.getenv("HALF_DAY_HOURS", "4")
LEAVE_CHECKIN_POLICY = os.getenv("LEAVE_CHECKIN_POLICY", "reject")
APPROVE_PAST_LEAVES = bool(int(os.getenv("APPROVE_PAST_LEAVES", "1")))
REJECT_OVERLAPPING_LEAVES = bool(int(os.getenv("REJECT_OVERLAPPING_LEAVES", "0")))
