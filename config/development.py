import os

from config.config import Config, _flag

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = Config.db_config()
SESSION_STORE = Config.SESSION_STORE

TIMEZONE = Config.TIMEZONE
GRACE_PERIOD_MINUTES = Config.GRACE_PERIOD_MINUTES
WATCHER_INTERVAL_SECONDS = Config.WATCHER_INTERVAL_SECONDS
DAILY_STANDUP_TIME = Config.DAILY_STANDUP_TIME

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = _flag("AUTO_INIT_DB", "1")
AUTO_SCHEDULE_DAILY = Config.AUTO_SCHEDULE_DAILY
ENABLE_SCHEDULER = _flag("ENABLE_SCHEDULER", "1")
