import os

from config.config import Config

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = Config.db_config()
SESSION_STORE = "mysql"

TIMEZONE = Config.TIMEZONE
GRACE_PERIOD_MINUTES = Config.GRACE_PERIOD_MINUTES
WATCHER_INTERVAL_SECONDS = Config.WATCHER_INTERVAL_SECONDS
DAILY_STANDUP_TIME = Config.DAILY_STANDUP_TIME

DEBUG = False
LOG_LEVEL = Config.LOG_LEVEL

AUTO_INIT_DB = Config.AUTO_INIT_DB
AUTO_SCHEDULE_DAILY = Config.AUTO_SCHEDULE_DAILY
# The scheduler normally runs in its own process (scripts/run_scheduler.py).
ENABLE_SCHEDULER = Config.ENABLE_SCHEDULER
