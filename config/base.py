import os

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "shiftclock"),
}

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Admin label ("Eastern Standard Time (EST)") or IANA name ("America/Chicago")
ORG_TIMEZONE = os.getenv("ORG_TIMEZONE", "America/New_York")
# date.weekday() numbering: 0 = Monday, 6 = Sunday
WEEK_START = int(os.getenv("WEEK_START", "6"))

PAYROLL_ROUNDING_INTERVAL = int(os.getenv("PAYROLL_ROUNDING_INTERVAL", "15"))
PAYROLL_ROUNDING_BUFFER = int(os.getenv("PAYROLL_ROUNDING_BUFFER", "5"))
OVERTIME_THRESHOLD_HOURS = float(os.getenv("OVERTIME_THRESHOLD_HOURS", "40"))

CLOCK_IN_GRACE_MINUTES = int(os.getenv("CLOCK_IN_GRACE_MINUTES", "15"))
ENFORCE_SHIFT_HOURS = bool(int(os.getenv("ENFORCE_SHIFT_HOURS", "0")))
