from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from src.standup_system.standup_system.core.exceptions import RosterUnavailable
from src.standup_system.standup_system.finalize.service import FinalizeService
from src.standup_system.standup_system.ledger.service import LedgerService
from src.standup_system.standup_system.marking.service import MarkingService
from src.standup_system.standup_system.roster.memory_roster_repository import InMemoryRosterRepository
from src.standup_system.standup_system.roster.model import Participant
from src.standup_system.standup_system.sessions.memory_session_store import InMemorySessionStore
from src.standup_system.standup_system.sessions.service import SessionService
from src.standup_system.standup_system.watcher.service import TimeoutWatcher

MONDAY = date(2026, 3, 2)


def at(hour: int, minute: int, second: int = 0, day: date = MONDAY) -> datetime:
    return datetime(day.year, day.month, day.day, hour, minute, second)


class FlakyRoster:
    """Roster that fails a given number of times before delegating."""

    def __init__(self, inner, failures: int = 1):
        self._inner = inner
        self.failures = failures
        self.calls = 0

    def list_active_participants(self):
        self.calls += 1
        if self.failures > 0:
            self.failures -= 1
            raise RosterUnavailable("directory offline")
        return self._inner.list_active_participants()


@pytest.fixture
def day() -> date:
    return MONDAY


@pytest.fixture
def participants() -> list[Participant]:
    return [
        Participant(
            participant_id=f"E{i}",
            name=f"Employee {i:02d}",
            email=f"e{i}@example.com",
            employee_code=f"EMP-{i:03d}",
        )
        for i in range(1, 11)
    ]


@pytest.fixture
def roster(participants) -> InMemoryRosterRepository:
    return InMemoryRosterRepository(participants)


@pytest.fixture
def store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def session_service(store, roster) -> SessionService:
    return SessionService(store, roster, default_time="09:00")


@pytest.fixture
def marking_service(store, roster) -> MarkingService:
    return MarkingService(store, roster)


@pytest.fixture
def finalize_service(store, roster) -> FinalizeService:
    return FinalizeService(store, roster)


@pytest.fixture
def ledger_service(store) -> LedgerService:
    return LedgerService(store)


@pytest.fixture
def watcher(store, finalize_service) -> TimeoutWatcher:
    return TimeoutWatcher(store, finalize_service, grace_period=timedelta(minutes=15))


@pytest.fixture
def scheduled_session(session_service, day):
    return session_service.schedule(day, scheduled_time=at(8, 45), scheduled_by="Admin", now=at(8, 0))


@pytest.fixture
def active_session(session_service, scheduled_session, day):
    return session_service.activate(day, now=at(8, 45))
