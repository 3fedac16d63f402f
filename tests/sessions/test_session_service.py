from __future__ import annotations

from datetime import date, datetime

import pytest

from conftest import FlakyRoster, at
from src.standup_system.standup_system.core.constants import SYSTEM_SCHEDULER
from src.standup_system.standup_system.core.enums import AttendanceStatus, SessionStatus
from src.standup_system.standup_system.core.exceptions import (
    InvalidTransition,
    RosterUnavailable,
    SessionNotFound,
    ValidationError,
)
from src.standup_system.standup_system.sessions.service import SessionService


def test_schedule_creates_scheduled_session(session_service, day):
    s = session_service.schedule(day, scheduled_time=at(8, 45), scheduled_by="Admin", now=at(8, 0))

    assert s.status == SessionStatus.SCHEDULED
    assert s.scheduled_time == at(8, 45)
    assert s.scheduled_by == "Admin"
    assert s.started_at is None and s.ended_at is None
    assert session_service.query(day) == s


def test_reschedule_while_scheduled(session_service, scheduled_session, day):
    s = session_service.schedule(day, scheduled_time=at(9, 30), scheduled_by="Co Admin", now=at(8, 10))

    assert s.status == SessionStatus.SCHEDULED
    assert s.scheduled_time == at(9, 30)
    assert s.scheduled_by == "Co Admin"


def test_schedule_rejected_once_active(session_service, active_session, day):
    with pytest.raises(InvalidTransition):
        session_service.schedule(day, scheduled_time=at(10, 0), scheduled_by="Admin", now=at(8, 50))


def test_schedule_rejected_once_ended(session_service, finalize_service, active_session, day):
    finalize_service.stop(day, now=at(8, 50))

    with pytest.raises(InvalidTransition):
        session_service.schedule(day, scheduled_time=at(10, 0), scheduled_by="Admin", now=at(8, 55))


def test_reschedule_of_active_session_in_the_past_is_a_transition_error(session_service, active_session, day):
    with pytest.raises(InvalidTransition):
        session_service.schedule(day, scheduled_time=at(8, 45), scheduled_by="Admin", now=at(8, 50))


def test_schedule_rejects_past_time(session_service, day):
    with pytest.raises(ValidationError):
        session_service.schedule(day, scheduled_time=at(8, 0), scheduled_by="Admin", now=at(8, 30))


def test_schedule_allows_current_minute(session_service, day):
    s = session_service.schedule(day, scheduled_time=at(8, 30), scheduled_by="Admin", now=at(8, 30, 40))
    assert s.scheduled_time == at(8, 30)


def test_schedule_rejects_time_on_another_day(session_service, day):
    with pytest.raises(ValidationError):
        session_service.schedule(
            day,
            scheduled_time=datetime(2026, 3, 3, 9, 0),
            scheduled_by="Admin",
            now=at(8, 0),
        )


def test_schedule_requires_operator_identity(session_service, day):
    with pytest.raises(ValidationError):
        session_service.schedule(day, scheduled_time=at(9, 0), scheduled_by="  ", now=at(8, 0))


def test_activate_sets_active_and_clears_maps(session_service, scheduled_session, day):
    s = session_service.activate(day, now=at(8, 45))

    assert s.status == SessionStatus.ACTIVE
    assert s.started_at == at(8, 45)
    assert dict(s.temp_attendance) == {}
    assert dict(s.absence_reasons) == {}


def test_activate_is_idempotent(session_service, active_session, day):
    again = session_service.activate(day, now=at(8, 47))

    assert again.status == SessionStatus.ACTIVE
    assert again.started_at == at(8, 45)


def test_activate_before_scheduled_time_is_rejected(session_service, scheduled_session, day):
    with pytest.raises(InvalidTransition):
        session_service.activate(day, now=at(8, 44, 59))

    assert session_service.query(day).status == SessionStatus.SCHEDULED


def test_activate_after_end_is_rejected(session_service, finalize_service, active_session, day):
    finalize_service.stop(day, now=at(8, 50))

    with pytest.raises(InvalidTransition):
        session_service.activate(day, now=at(8, 55))


def test_activate_unknown_day(session_service):
    with pytest.raises(SessionNotFound):
        session_service.activate(date(2026, 3, 9), now=at(9, 0))


def test_activate_keeps_schedule_when_roster_unavailable(store, roster, day):
    service = SessionService(store, FlakyRoster(roster, failures=1))
    service.schedule(day, scheduled_time=at(8, 45), scheduled_by="Admin", now=at(8, 0))

    with pytest.raises(RosterUnavailable):
        service.activate(day, now=at(8, 45))
    assert service.query(day).status == SessionStatus.SCHEDULED

    assert service.activate(day, now=at(8, 46)).status == SessionStatus.ACTIVE


def test_query_snapshot_is_read_only(session_service, marking_service, active_session, day):
    marking_service.set_status(day, "E1", AttendanceStatus.PRESENT)
    snapshot = session_service.query(day)

    with pytest.raises(TypeError):
        snapshot.temp_attendance["E2"] = AttendanceStatus.PRESENT
    with pytest.raises(AttributeError):
        snapshot.status = SessionStatus.ENDED

    assert "E2" not in session_service.query(day).temp_attendance


def test_query_missing_returns_none(session_service):
    assert session_service.query(date(2026, 3, 9)) is None


def test_schedule_daily_uses_default_time(session_service, day):
    s = session_service.schedule_daily(day, now=at(1, 0))

    assert s.status == SessionStatus.SCHEDULED
    assert s.scheduled_time == at(9, 0)
    assert s.scheduled_by == SYSTEM_SCHEDULER


def test_schedule_daily_skips_sunday(session_service):
    sunday = date(2026, 3, 1)
    assert session_service.schedule_daily(sunday) is None
    assert session_service.query(sunday) is None


def test_schedule_daily_leaves_existing_session(session_service, scheduled_session, day):
    assert session_service.schedule_daily(day, now=at(1, 0)) is None
    assert session_service.query(day).scheduled_time == at(8, 45)


def test_activate_due_starts_only_due_sessions(session_service, day):
    session_service.schedule(day, scheduled_time=at(8, 45), scheduled_by="Admin", now=at(8, 0))
    tomorrow = date(2026, 3, 3)
    session_service.schedule(
        tomorrow,
        scheduled_time=datetime(2026, 3, 3, 8, 45),
        scheduled_by="Admin",
        now=at(8, 0),
    )

    assert session_service.activate_due(now=at(8, 40)) == []

    activated = session_service.activate_due(now=at(8, 45))
    assert [s.session_date for s in activated] == [day]
    assert session_service.query(tomorrow).status == SessionStatus.SCHEDULED


def test_subscribers_receive_lifecycle_events(session_service, day):
    events = []
    unsubscribe = session_service.subscribe(day, events.append)

    session_service.schedule(day, scheduled_time=at(8, 45), scheduled_by="Admin", now=at(8, 0))
    session_service.activate(day, now=at(8, 45))
    unsubscribe()
    session_service.activate(day, now=at(8, 46))

    assert [e.kind for e in events] == ["scheduled", "active"]
    assert events[-1].session.status == SessionStatus.ACTIVE
