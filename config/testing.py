from config.config import Config

SECRET_KEY = "test-secret"

DB_CONFIG = Config.db_config()
SESSION_STORE = "memory"

TIMEZONE = Config.TIMEZONE
GRACE_PERIOD_MINUTES = 15
WATCHER_INTERVAL_SECONDS = 30
DAILY_STANDUP_TIME = "09:00"

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = False
AUTO_SCHEDULE_DAILY = False
ENABLE_SCHEDULER = False
