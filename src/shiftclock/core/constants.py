"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_TIMEZONE = "America/New_York"
DEFAULT_WEEK_START = 6  # Sunday

DEFAULT_ROUNDING_INTERVAL = 15
DEFAULT_ROUNDING_BUFFER = 5
DEFAULT_OVERTIME_THRESHOLD_HOURS = 40
DEFAULT_HOURLY_RATE = 0.0

DEFAULT_GEOFENCE_RADIUS_METERS = 100
DEFAULT_CLOCK_IN_GRACE_MINUTES = 15

DEFAULT_SCHEDULE_DAYS = 7

# Safety caps for repeating one-off shifts.
MAX_DAILY_OCCURRENCES = 90
MAX_WEEKLY_OCCURRENCES = 52
MAX_MONTHLY_OCCURRENCES = 24
