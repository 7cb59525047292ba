"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

SETTINGS_ROW_ID = "app_settings"

DEFAULT_MAX_CLASSES = 10
DEFAULT_MONTHLY_ABSENCE_THRESHOLD = 4
DEFAULT_QUARTERLY_ABSENCE_THRESHOLD = 10
THRESHOLD_MIN = 1
THRESHOLD_MAX = 100

MIN_PASSWORD_LENGTH = 6
DEFAULT_ADMIN_CODE = "admin123"
ADMIN_SELECTOR = "admin"

DEFAULT_SAVE_TIMEOUT_SECONDS = 30
RECENT_STATS_DAYS = 7
