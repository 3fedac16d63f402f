from __future__ import annotations

import threading
from datetime import date

import pytest

from conftest import at
from src.standup_system.standup_system.core.enums import AttendanceStatus
from src.standup_system.standup_system.core.exceptions import (
    EmptyReason,
    SessionNotActive,
    SessionNotFound,
    ValidationError,
)


def test_set_status_records_mark(marking_service, active_session, day):
    s = marking_service.set_status(day, "E1", AttendanceStatus.PRESENT, operator="Admin")

    assert s.temp_attendance["E1"] == AttendanceStatus.PRESENT
    assert "E1" not in s.absence_reasons


def test_set_status_accepts_status_value(marking_service, active_session, day):
    s = marking_service.set_status(day, "E2", "Absent")
    assert s.temp_attendance["E2"] == AttendanceStatus.ABSENT


def test_set_status_rejects_unknown_value(marking_service, active_session, day):
    with pytest.raises(ValidationError):
        marking_service.set_status(day, "E2", "Late")


def test_set_status_not_available_requires_reason(marking_service, active_session, day):
    with pytest.raises(EmptyReason):
        marking_service.set_status(day, "E3", AttendanceStatus.NOT_AVAILABLE)


def test_set_unavailable_stores_reason(marking_service, active_session, day):
    s = marking_service.set_unavailable(day, "E3", "  on leave ")

    assert s.temp_attendance["E3"] == AttendanceStatus.NOT_AVAILABLE
    assert s.absence_reasons["E3"] == "on leave"


@pytest.mark.parametrize("reason", ["", "   ", None])
def test_set_unavailable_rejects_empty_reason(marking_service, active_session, day, reason):
    with pytest.raises(EmptyReason):
        marking_service.set_unavailable(day, "E3", reason)

    assert "E3" not in marking_service._store.get(day).temp_attendance


def test_empty_reason_is_a_validation_error():
    assert issubclass(EmptyReason, ValidationError)


def test_switching_away_from_not_available_clears_reason(marking_service, active_session, day):
    marking_service.set_unavailable(day, "E4", "doctor")
    s = marking_service.set_status(day, "E4", AttendanceStatus.PRESENT)

    assert s.temp_attendance["E4"] == AttendanceStatus.PRESENT
    assert "E4" not in s.absence_reasons


def test_marking_rejected_while_scheduled(marking_service, scheduled_session, day):
    with pytest.raises(SessionNotActive):
        marking_service.set_status(day, "E1", AttendanceStatus.PRESENT)


def test_marking_rejected_after_end(marking_service, finalize_service, active_session, day):
    finalize_service.stop(day, now=at(8, 50))

    with pytest.raises(SessionNotActive):
        marking_service.set_status(day, "E1", AttendanceStatus.ABSENT)
    with pytest.raises(SessionNotActive):
        marking_service.set_unavailable(day, "E1", "late mark")


def test_marking_unknown_session(marking_service):
    with pytest.raises(SessionNotFound):
        marking_service.set_status(date(2026, 3, 9), "E1", AttendanceStatus.PRESENT)


def test_concurrent_operators_on_different_participants(marking_service, active_session, day):
    barrier = threading.Barrier(2)
    errors = []

    def mark_present():
        barrier.wait()
        try:
            marking_service.set_status(day, "E1", AttendanceStatus.PRESENT, operator="Admin")
        except Exception as e:  # pragma: no cover
            errors.append(e)

    def mark_unavailable():
        barrier.wait()
        try:
            marking_service.set_unavailable(day, "E2", "sick", operator="Co Admin")
        except Exception as e:  # pragma: no cover
            errors.append(e)

    threads = [threading.Thread(target=mark_present), threading.Thread(target=mark_unavailable)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    s = marking_service._store.get(day)
    assert s.temp_attendance["E1"] == AttendanceStatus.PRESENT
    assert s.temp_attendance["E2"] == AttendanceStatus.NOT_AVAILABLE
    assert s.absence_reasons["E2"] == "sick"


def test_many_parallel_marks_all_survive(marking_service, participants, active_session, day):
    threads = [
        threading.Thread(target=marking_service.set_status, args=(day, p.participant_id, AttendanceStatus.PRESENT))
        for p in participants
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    s = marking_service._store.get(day)
    assert set(s.temp_attendance) == {p.participant_id for p in participants}


def test_same_participant_ends_with_one_submitted_value(marking_service, active_session, day):
    barrier = threading.Barrier(2)

    def mark(status):
        barrier.wait()
        marking_service.set_status(day, "E5", status)

    threads = [
        threading.Thread(target=mark, args=(AttendanceStatus.PRESENT,)),
        threading.Thread(target=mark, args=(AttendanceStatus.ABSENT,)),
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert marking_service._store.get(day).temp_attendance["E5"] in {
        AttendanceStatus.PRESENT,
        AttendanceStatus.ABSENT,
    }


def test_subscribers_see_member_deltas(session_service, marking_service, active_session, day):
    events = []
    session_service.subscribe(day, events.append)

    marking_service.set_status(day, "E1", AttendanceStatus.PRESENT)
    marking_service.set_unavailable(day, "E2", "travel")

    assert [e.kind for e in events] == ["marked", "marked"]
    assert events[0].delta["temp_attendance"] == {"E1": AttendanceStatus.PRESENT}
    assert events[0].delta["absence_reasons"] == {"E1": None}
    assert events[1].delta["absence_reasons"] == {"E2": "travel"}
    assert events[1].session.temp_attendance["E1"] == AttendanceStatus.PRESENT


def test_live_stats_counts_unmarked_as_missed(marking_service, active_session, day):
    marking_service.set_status(day, "E1", AttendanceStatus.PRESENT)
    marking_service.set_status(day, "E2", AttendanceStatus.PRESENT)
    marking_service.set_status(day, "E3", AttendanceStatus.ABSENT)
    marking_service.set_unavailable(day, "E4", "leave")

    stats = marking_service.live_stats(day)

    assert stats.total == 10
    assert (stats.present, stats.absent, stats.not_available, stats.missed) == (2, 1, 1, 6)
    assert stats.marked == 4
    assert stats.to_dict()["session_id"] == "2026-03-02"


def test_live_stats_unknown_session(marking_service):
    with pytest.raises(SessionNotFound):
        marking_service.live_stats(date(2026, 3, 9))


def test_broken_listener_does_not_fail_the_write(session_service, marking_service, active_session, day):
    def boom(change):
        raise RuntimeError("listener down")

    seen = []
    session_service.subscribe(day, boom)
    session_service.subscribe(day, seen.append)

    s = marking_service.set_status(day, "E1", AttendanceStatus.PRESENT)

    assert s.temp_attendance["E1"] == AttendanceStatus.PRESENT
    assert len(seen) == 1
