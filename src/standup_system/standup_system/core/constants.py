"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_GRACE_PERIOD_MINUTES = 15
DEFAULT_WATCHER_INTERVAL_SECONDS = 30
DEFAULT_STANDUP_TIME = "09:00"
DEFAULT_TIMEZONE = "Asia/Kolkata"

SYSTEM_SCHEDULER = "System Automation"
MISSING_REASON_PLACEHOLDER = "No reason provided"
