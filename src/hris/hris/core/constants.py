"""Constants and defaults.

Keep business constants here instead of spreading magic numbers across modules.
"""

DEFAULT_SESSION_DAYS = 7
DEFAULT_HISTORY_LIMIT = 30
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

# Asia/Jakarta (WIB)
DEFAULT_UTC_OFFSET_HOURS = 7

DEFAULT_OFFICE_START_TIME = "09:00"
DEFAULT_OFFICE_END_TIME = "17:00"

DEFAULT_ANNUAL_LEAVE_QUOTA = 12
DEFAULT_TAX_STATUS = "TK/0"

# Company whose payroll_settings rows act as defaults for every tenant.
DEFAULT_SETTINGS_COMPANY_ID = 1

DEFAULT_POSITION_TITLES = ("Intern", "Staff", "Senior Staff", "Supervisor", "Manager", "Director")

DEFAULT_NOTIFICATION_ROLES = "ADMIN,SUPERADMIN,EMPLOYEE"

USERNAME_MAX_ATTEMPTS = 10
