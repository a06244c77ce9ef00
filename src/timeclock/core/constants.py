"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

WORK_START_HOUR = 9
WORK_START_MINUTE = 0
WORK_END_HOUR = 17
WORK_END_MINUTE = 0

# 0 = Monday ... 6 = Sunday (datetime.weekday())
WEEKEND_WEEKDAYS = (5, 6)

HOURS_PER_DAY = 8
MAX_HOURS_PER_DAY = 12
DEFAULT_CHECKOUT_HOURS = 8
DEFAULT_LATE_GRACE_MINUTES = 15

MIN_CORRECTION_REASON_LENGTH = 5
AUDIT_REASON_PREVIEW = 50

DEFAULT_HISTORY_LIMIT = 30
DEFAULT_PAGE_SIZE = 20

PERMISSION_CACHE_TTL_SECONDS = 5 * 60
ATTENDANCE_MANAGEMENT = "attendance_management"
ADMIN_ROLE = "admin"

# Settings defaults applied on first read (work days use 0 = Sunday ... 6 = Saturday)
DEFAULT_WORK_HOURS_PER_DAY = 8
DEFAULT_WORK_DAYS = "1,2,3,4,5"
DEFAULT_REMINDER_ENABLED = True
DEFAULT_AUTO_CHECKOUT_ENABLED = False
