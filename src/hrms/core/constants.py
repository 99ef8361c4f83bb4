"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

BUSINESS_UTC_OFFSET_HOURS = 5
MIN_SESSION_SECONDS = 60
DEFAULT_LOCATION = "Office"
MAX_NOTES_LENGTH = 500
MAX_LOCATION_LENGTH = 100
MAX_DEVICE_INFO_LENGTH = 255

DEFAULT_HISTORY_LIMIT = 10
DEFAULT_ADMIN_LIST_LIMIT = 20
DEFAULT_PAYROLL_LIMIT = 12
MAX_PAGE_LIMIT = 100

DEFAULT_STANDARD_DAILY_HOURS = 8.0
DEFAULT_TAX_RATE = 10.0
DEFAULT_INSURANCE_RATE = 5.0

PAYROLL_MIN_YEAR = 2020
PAYROLL_MAX_YEAR = 2100

LEAVE_REASON_MIN_LENGTH = 5
LEAVE_REASON_MAX_LENGTH = 500
