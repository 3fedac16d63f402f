"""
Background jobs for the standup lifecycle.

Uses APScheduler to run:
- the daily automatic schedule (01:00, Monday to Saturday)
- the activation trigger (every minute)
- the timeout watcher (every WATCHER_INTERVAL_SECONDS)
"""

from __future__ import annotations

import logging
from typing import Optional

from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_MISSED
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_WATCHER_INTERVAL_SECONDS
from ..sessions.service import SessionService
from .service import TimeoutWatcher

logger = logging.getLogger(__name__)

# Global scheduler instance
scheduler: Optional[BackgroundScheduler] = None


def _on_job_error(event):
    logger.error(
        "Scheduled job FAILED: job_id=%s error=%s",
        event.job_id,
        event.exception,
        exc_info=(type(event.exception), event.exception, None) if event.exception else None,
    )
    if event.traceback:
        logger.error("Traceback for job %s:\n%s", event.job_id, event.traceback)


def _on_job_missed(event):
    logger.warning(
        "Scheduled job MISSED: job_id=%s scheduled_run_time=%s",
        event.job_id,
        event.scheduled_run_time,
    )


def run_daily_schedule(sessions: SessionService, tz_name: Optional[str] = None) -> None:
    sessions.schedule_daily(now_local(tz_name).date())


def run_activation(sessions: SessionService) -> None:
    sessions.activate_due()


def run_watcher(watcher: TimeoutWatcher) -> None:
    watcher.tick()


def build_scheduler(
    sessions: SessionService,
    watcher: TimeoutWatcher,
    *,
    timezone: str = "UTC",
    watcher_interval_seconds: int = DEFAULT_WATCHER_INTERVAL_SECONDS,
    auto_schedule_daily: bool = True,
) -> BackgroundScheduler:
    """Create (but do not start) the scheduler with all standup jobs."""

    sched = BackgroundScheduler(
        timezone=timezone,
        job_defaults={
            "coalesce": True,  # Combine missed executions
            "max_instances": 1,  # Only one instance of each job at a time
            "misfire_grace_time": 60,
        },
    )

    if auto_schedule_daily:
        sched.add_job(
            func=run_daily_schedule,
            trigger=CronTrigger(day_of_week="mon-sat", hour=1, minute=0, timezone=timezone),
            args=[sessions, timezone],
            id="schedule_daily_standup",
            name="Schedule Daily Standup",
            replace_existing=True,
        )
        logger.info("Scheduled job: schedule_daily_standup (mon-sat 01:00 %s)", timezone)

    sched.add_job(
        func=run_activation,
        trigger=IntervalTrigger(minutes=1),
        args=[sessions],
        id="activate_due_standups",
        name="Activate Due Standups",
        replace_existing=True,
    )
    logger.info("Scheduled job: activate_due_standups (every 1 minute)")

    sched.add_job(
        func=run_watcher,
        trigger=IntervalTrigger(seconds=int(watcher_interval_seconds)),
        args=[watcher],
        id="standup_timeout_watcher",
        name="Auto-close Standups After Grace Period",
        replace_existing=True,
    )
    logger.info("Scheduled job: standup_timeout_watcher (every %s seconds)", watcher_interval_seconds)

    sched.add_listener(_on_job_error, EVENT_JOB_ERROR)
    sched.add_listener(_on_job_missed, EVENT_JOB_MISSED)
    return sched


def init_scheduler(
    sessions: SessionService,
    watcher: TimeoutWatcher,
    **options,
) -> BackgroundScheduler:
    """Build and start the process-wide scheduler once."""

    global scheduler

    if scheduler is not None:
        logger.warning("Scheduler already initialized")
        return scheduler

    scheduler = build_scheduler(sessions, watcher, **options)
    scheduler.start()
    logger.info("Standup scheduler started")
    return scheduler


def shutdown_scheduler() -> None:
    global scheduler

    if scheduler is not None:
        scheduler.shutdown(wait=False)
        scheduler = None
        logger.info("Standup scheduler stopped")
