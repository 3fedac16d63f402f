from __future__ import annotations

import logging
from datetime import date, datetime
from typing import List, Optional, Sequence

from ..common.datetime_utils import now_local, session_key
from ..core.constants import MISSING_REASON_PLACEHOLDER
from ..core.enums import AttendanceStatus, FinalizeResult, FinalizeTrigger, SessionStatus
from ..core.exceptions import SessionNotActive, SessionNotFound
from ..ledger.model import AttendanceRecord, record_id_for
from ..roster.model import Participant
from ..roster.repository import RosterProvider
from ..sessions.model import Session
from ..sessions.repository import SessionStore
from .model import FinalizeOutcome

logger = logging.getLogger(__name__)


def materialize_records(
    session: Session,
    participants: Sequence[Participant],
    *,
    finalized_at: datetime,
) -> List[AttendanceRecord]:
    """Resolve one ledger record per roster participant from the session's marks."""

    records: List[AttendanceRecord] = []
    for p in participants:
        status = session.temp_attendance.get(p.participant_id, AttendanceStatus.MISSED)
        reason = None
        if status == AttendanceStatus.NOT_AVAILABLE:
            reason = session.absence_reasons.get(p.participant_id) or MISSING_REASON_PLACEHOLDER

        records.append(
            AttendanceRecord(
                record_id=record_id_for(session.session_date, p.participant_id),
                session_id=session.session_id,
                participant_id=p.participant_id,
                participant_name=p.name,
                participant_email=p.email,
                employee_code=p.employee_code,
                status=status,
                scheduled_at=session.scheduled_time,
                finalized_at=finalized_at,
                reason=reason,
            )
        )
    return records


class FinalizeService:
    """Use case: close the standup and write the attendance ledger exactly once.

    Manual stop and the timeout watcher share `finalize`. The store's
    compare-and-swap decides the single winner; every other caller gets the
    committed outcome back as ALREADY_FINALIZED. The roster is read inside
    the guarded step, so only the winner reads it.
    """

    def __init__(self, store: SessionStore, roster: RosterProvider, *, tz_name: Optional[str] = None):
        self._store = store
        self._roster = roster
        self._tz_name = tz_name

    def stop(self, session_date: date, *, now: Optional[datetime] = None, operator: Optional[str] = None) -> FinalizeOutcome:
        if operator:
            logger.info("Standup %s stop requested by %s", session_key(session_date), operator)
        return self.finalize(session_date, now=now, trigger=FinalizeTrigger.MANUAL)

    def finalize(
        self,
        session_date: date,
        *,
        now: Optional[datetime] = None,
        trigger: FinalizeTrigger = FinalizeTrigger.MANUAL,
    ) -> FinalizeOutcome:
        now = now or now_local(self._tz_name)

        session = self._store.get(session_date)
        if session is None:
            raise SessionNotFound(f"No standup for {session_key(session_date)}")
        if session.status == SessionStatus.ENDED:
            return self._committed_outcome(session, trigger)
        if session.status != SessionStatus.ACTIVE:
            raise SessionNotActive(f"Standup {session.session_id} has not started yet")

        committed = self._store.commit_finalize(
            session_date,
            ended_at=now,
            build_records=lambda locked: materialize_records(
                locked, self._roster.list_active_participants(), finalized_at=now
            ),
        )
        if committed is None:
            current = self._store.get(session_date)
            if current is not None and current.status == SessionStatus.ENDED:
                return self._committed_outcome(current, trigger)
            raise SessionNotActive(f"Standup {session_key(session_date)} is not active")

        ended, records = committed
        logger.info(
            "Standup %s ended (%s): %d attendance records written",
            ended.session_id,
            trigger.value,
            len(records),
        )
        return FinalizeOutcome(
            result=FinalizeResult.COMMITTED,
            trigger=trigger,
            session=ended,
            records=tuple(sorted(records, key=lambda r: (r.participant_name, r.participant_id))),
        )

    def _committed_outcome(self, session: Session, trigger: FinalizeTrigger) -> FinalizeOutcome:
        logger.debug("Standup %s already finalized; %s call is a no-op", session.session_id, trigger.value)
        records = self._store.list_for_session(session.session_date)
        return FinalizeOutcome(
            result=FinalizeResult.ALREADY_FINALIZED,
            trigger=trigger,
            session=session,
            records=tuple(sorted(records, key=lambda r: (r.participant_name, r.participant_id))),
        )
