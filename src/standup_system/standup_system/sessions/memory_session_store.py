from __future__ import annotations

import threading
from dataclasses import replace
from datetime import date, datetime
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Tuple

from ..core.enums import AttendanceStatus, SessionStatus
from ..core.exceptions import BatchWriteFailed
from ..ledger.model import AttendanceRecord
from .events import ChangeHub, SessionListener
from .model import Session, SessionChange
from .repository import RecordBuilder, SessionStore

_CAS_FIELDS = {"started_at", "ended_at", "temp_attendance", "absence_reasons"}


class InMemorySessionStore(SessionStore):
    """Process-local session store.

    All writes are serialised by one re-entrant lock and change events are
    published while it is held, so subscribers see writes in commit order.
    """

    def __init__(self, hub: Optional[ChangeHub] = None):
        self._lock = threading.RLock()
        self._sessions: Dict[date, Session] = {}
        self._records: Dict[date, Dict[str, AttendanceRecord]] = {}
        self._hub = hub or ChangeHub()

    def get(self, session_date: date) -> Optional[Session]:
        with self._lock:
            return self._sessions.get(session_date)

    def list_by_status(self, status: SessionStatus) -> Sequence[Session]:
        with self._lock:
            return sorted(
                (s for s in self._sessions.values() if s.status == status),
                key=lambda s: s.session_date,
            )

    def put_schedule(
        self,
        session_date: date,
        *,
        scheduled_time: datetime,
        scheduled_by: str,
        create_only: bool = False,
    ) -> Optional[Session]:
        with self._lock:
            current = self._sessions.get(session_date)
            if current is None:
                updated = Session(
                    session_date=session_date,
                    status=SessionStatus.SCHEDULED,
                    scheduled_time=scheduled_time,
                    scheduled_by=scheduled_by,
                )
            elif create_only or current.status != SessionStatus.SCHEDULED:
                return None
            else:
                updated = replace(current, scheduled_time=scheduled_time, scheduled_by=scheduled_by)

            self._sessions[session_date] = updated
            self._publish(
                updated,
                "scheduled",
                {"status": updated.status, "scheduled_time": scheduled_time, "scheduled_by": scheduled_by},
            )
            return updated

    def compare_and_set_status(
        self,
        session_date: date,
        *,
        expected: SessionStatus,
        new: SessionStatus,
        fields: Mapping[str, Any],
    ) -> Optional[Session]:
        unknown = set(fields) - _CAS_FIELDS
        if unknown:
            raise ValueError(f"Unsupported session fields: {sorted(unknown)}")

        with self._lock:
            current = self._sessions.get(session_date)
            if current is None or current.status != expected:
                return None

            updated = replace(current, status=new, **dict(fields))
            self._sessions[session_date] = updated
            self._publish(updated, new.value, {"status": new, **dict(fields)})
            return updated

    def merge_marks(
        self,
        session_date: date,
        *,
        attendance: Mapping[str, AttendanceStatus],
        reasons: Mapping[str, Optional[str]],
    ) -> Optional[Session]:
        with self._lock:
            current = self._sessions.get(session_date)
            if current is None or current.status != SessionStatus.ACTIVE:
                return None

            temp = dict(current.temp_attendance)
            temp.update(attendance)
            absence = dict(current.absence_reasons)
            for participant_id, reason in reasons.items():
                if reason is None:
                    absence.pop(participant_id, None)
                else:
                    absence[participant_id] = reason

            updated = replace(current, temp_attendance=temp, absence_reasons=absence)
            self._sessions[session_date] = updated
            self._publish(
                updated,
                "marked",
                {"temp_attendance": dict(attendance), "absence_reasons": dict(reasons)},
            )
            return updated

    def commit_finalize(
        self,
        session_date: date,
        *,
        ended_at: datetime,
        build_records: RecordBuilder,
    ) -> Optional[Tuple[Session, Sequence[AttendanceRecord]]]:
        with self._lock:
            current = self._sessions.get(session_date)
            if current is None or current.status != SessionStatus.ACTIVE:
                return None

            records = list(build_records(current))
            existing = self._records.get(session_date, {})
            staged: Dict[str, AttendanceRecord] = {}
            for record in records:
                if record.record_id in staged or record.record_id in existing:
                    raise BatchWriteFailed(f"Duplicate attendance record {record.record_id}")
                staged[record.record_id] = record

            self._apply_batch(session_date, staged)

            ended = replace(current, status=SessionStatus.ENDED, ended_at=ended_at)
            self._sessions[session_date] = ended
            self._publish(ended, SessionStatus.ENDED.value, {"status": SessionStatus.ENDED, "ended_at": ended_at})
            return ended, records

    def _apply_batch(self, session_date: date, staged: Dict[str, AttendanceRecord]) -> None:
        self._records.setdefault(session_date, {}).update(staged)

    def list_for_session(self, session_date: date) -> Sequence[AttendanceRecord]:
        with self._lock:
            return list(self._records.get(session_date, {}).values())

    def subscribe(self, session_date: date, listener: SessionListener) -> Callable[[], None]:
        return self._hub.subscribe(session_date, listener)

    def _publish(self, session: Session, kind: str, delta: Mapping[str, Any]) -> None:
        self._hub.publish(SessionChange(session_date=session.session_date, kind=kind, delta=delta, session=session))
