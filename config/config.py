import os


def _flag(name: str, default: str) -> bool:
    return bool(int(os.environ.get(name, default)))


class Config:
    """Shared defaults, read from the environment (.env is loaded by create_app)."""

    SECRET_KEY = os.environ.get("SECRET_KEY") or "change-me"

    DB_USER = os.environ.get("DB_USER", "root")
    DB_PASSWORD = os.environ.get("DB_PASSWORD", "")
    DB_HOST = os.environ.get("DB_HOST", "localhost")
    DB_PORT = int(os.environ.get("DB_PORT", "3306"))
    DB_NAME = os.environ.get("DB_NAME", "standup_db")

    # "mysql" or "memory"
    SESSION_STORE = os.environ.get("SESSION_STORE", "mysql")

    TIMEZONE = os.environ.get("TIMEZONE", "Asia/Kolkata")
    # Fixed auto-close window after the scheduled start.
    GRACE_PERIOD_MINUTES = int(os.environ.get("GRACE_PERIOD_MINUTES", "15"))
    WATCHER_INTERVAL_SECONDS = int(os.environ.get("WATCHER_INTERVAL_SECONDS", "30"))
    DAILY_STANDUP_TIME = os.environ.get("DAILY_STANDUP_TIME", "09:00")

    AUTO_INIT_DB = _flag("AUTO_INIT_DB", "0")
    AUTO_SCHEDULE_DAILY = _flag("AUTO_SCHEDULE_DAILY", "1")
    ENABLE_SCHEDULER = _flag("ENABLE_SCHEDULER", "0")

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    @classmethod
    def db_config(cls) -> dict:
        return {
            "host": cls.DB_HOST,
            "port": cls.DB_PORT,
            "user": cls.DB_USER,
            "password": cls.DB_PASSWORD,
            "database": cls.DB_NAME,
        }
