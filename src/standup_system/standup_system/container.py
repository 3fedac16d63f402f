from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from .core.constants import (
    DEFAULT_GRACE_PERIOD_MINUTES,
    DEFAULT_STANDUP_TIME,
    DEFAULT_TIMEZONE,
    DEFAULT_WATCHER_INTERVAL_SECONDS,
)
from .database.connection import DBConfig, DatabaseConnection
from .finalize.service import FinalizeService
from .ledger.service import LedgerService
from .marking.service import MarkingService
from .roster.memory_roster_repository import InMemoryRosterRepository
from .roster.mysql_roster_repository import MySQLRosterRepository
from .roster.repository import RosterProvider
from .sessions.memory_session_store import InMemorySessionStore
from .sessions.mysql_session_store import MySQLSessionStore
from .sessions.repository import SessionStore
from .sessions.service import SessionService
from .watcher.service import TimeoutWatcher


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    store: SessionStore
    roster: RosterProvider

    session_service: SessionService
    marking_service: MarkingService
    finalize_service: FinalizeService
    ledger_service: LedgerService
    watcher: TimeoutWatcher

    timezone: str
    watcher_interval_seconds: int


def build_container(
    *,
    db_config: Optional[dict] = None,
    session_store: str = "mysql",
    timezone: str = DEFAULT_TIMEZONE,
    grace_period_minutes: int = DEFAULT_GRACE_PERIOD_MINUTES,
    daily_standup_time: str = DEFAULT_STANDUP_TIME,
    watcher_interval_seconds: int = DEFAULT_WATCHER_INTERVAL_SECONDS,
) -> Container:
    conn: Optional[DatabaseConnection] = None

    if session_store == "memory":
        store: SessionStore = InMemorySessionStore()
        roster: RosterProvider = InMemoryRosterRepository()
    elif session_store == "mysql":
        if not db_config:
            raise ValueError("db_config is required for the mysql session store")
        config = DBConfig(
            host=str(db_config["host"]),
            port=int(db_config.get("port", 3306)),
            user=str(db_config["user"]),
            password=str(db_config["password"]),
            database=str(db_config["database"]),
        )
        conn = DatabaseConnection.get_instance(config)
        store = MySQLSessionStore(conn)
        roster = MySQLRosterRepository(conn)
    else:
        raise ValueError(f"Unknown session store backend: {session_store!r}")

    session_service = SessionService(store, roster, default_time=daily_standup_time, tz_name=timezone)
    marking_service = MarkingService(store, roster)
    finalize_service = FinalizeService(store, roster, tz_name=timezone)
    ledger_service = LedgerService(store)
    watcher = TimeoutWatcher(
        store,
        finalize_service,
        grace_period=timedelta(minutes=int(grace_period_minutes)),
        tz_name=timezone,
    )

    return Container(
        conn=conn,
        store=store,
        roster=roster,
        session_service=session_service,
        marking_service=marking_service,
        finalize_service=finalize_service,
        ledger_service=ledger_service,
        watcher=watcher,
        timezone=timezone,
        watcher_interval_seconds=int(watcher_interval_seconds),
    )


def build_container_from_settings(settings) -> Container:
    return build_container(
        db_config=getattr(settings, "DB_CONFIG", None),
        session_store=getattr(settings, "SESSION_STORE", "mysql"),
        timezone=getattr(settings, "TIMEZONE", DEFAULT_TIMEZONE),
        grace_period_minutes=int(getattr(settings, "GRACE_PERIOD_MINUTES", DEFAULT_GRACE_PERIOD_MINUTES)),
        daily_standup_time=getattr(settings, "DAILY_STANDUP_TIME", DEFAULT_STANDUP_TIME),
        watcher_interval_seconds=int(getattr(settings, "WATCHER_INTERVAL_SECONDS", DEFAULT_WATCHER_INTERVAL_SECONDS)),
    )
