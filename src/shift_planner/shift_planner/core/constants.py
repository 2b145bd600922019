"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import timedelta

# Timeline (decimal hours)
TIMELINE_START_HOUR = 8
TIMELINE_END_HOUR = 21
MINUTES_STEP = 15
QUARTERS_PER_HOUR = 60 // MINUTES_STEP
TOTAL_QUARTERS = (TIMELINE_END_HOUR - TIMELINE_START_HOUR) * QUARTERS_PER_HOUR

# Login lockout
MAX_LOGIN_ATTEMPTS = 5
LOCKOUT_DURATION = timedelta(minutes=15)
MIN_PASSWORD_LENGTH = 8

# Credential tokens
PASSWORD_RESET_TTL = timedelta(hours=1)
INITIAL_SETUP_TTL = timedelta(hours=24)
TOKEN_BYTES = 32

# Imports
ROLLBACK_WINDOW = timedelta(hours=24)
DEFAULT_DEPARTMENT = "システム部署"
DEFAULT_TEAM = "システムチーム"

# Presets
TEMPORARY_PRESET_TTL = timedelta(days=7)

CONTRACT_MEMO = "契約による基本勤務時間"
MASKED_MEMO = "***"
DEFAULT_HISTORY_LIMIT = 200

# Support assignments and daily duties
DEFAULT_SUPPORT_REASON = "支援"
RECEPTION_KEYWORD = "受付"
MAX_CUSTOM_DUTY_LENGTH = 200
