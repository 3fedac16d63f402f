"""Run the standup background jobs (daily schedule, activation, timeout watcher).

Runs in its own process so the watcher keeps closing sessions even when no
web worker is up.
"""

from __future__ import annotations

import importlib
import logging
import signal
import sys
import threading
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.standup_system.standup_system.container import build_container_from_settings
from src.standup_system.standup_system.main import configure_logging
from src.standup_system.standup_system.watcher.scheduler import init_scheduler, shutdown_scheduler

logger = logging.getLogger("standup.scheduler")


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    container = build_container_from_settings(settings)
    init_scheduler(
        container.session_service,
        container.watcher,
        timezone=container.timezone,
        watcher_interval_seconds=container.watcher_interval_seconds,
        auto_schedule_daily=bool(getattr(settings, "AUTO_SCHEDULE_DAILY", True)),
    )

    stop = threading.Event()
    signal.signal(signal.SIGINT, lambda *_: stop.set())
    signal.signal(signal.SIGTERM, lambda *_: stop.set())
    logger.info("Scheduler process running (grace period %s)", container.watcher.grace_period)
    stop.wait()
    shutdown_scheduler()


if __name__ == "__main__":
    main()
