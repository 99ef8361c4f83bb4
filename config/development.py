import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "hrms_db"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed demo data on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

# Business day boundaries are computed in this fixed offset
BUSINESS_UTC_OFFSET_HOURS = float(os.getenv("BUSINESS_UTC_OFFSET_HOURS", "5"))

# "HH:MM" business-local; empty disables lateness marking
LATE_CUTOFF = os.getenv("LATE_CUTOFF", "")
LATE_GRACE_MINUTES = int(os.getenv("LATE_GRACE_MINUTES", "0"))

# Overtime threshold for profiles without their own
STANDARD_DAILY_HOURS = float(os.getenv("STANDARD_DAILY_HOURS", "8"))
