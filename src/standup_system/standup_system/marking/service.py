from __future__ import annotations

import logging
from collections import Counter
from datetime import date
from typing import NoReturn, Optional

from ..common.datetime_utils import session_key
from ..common.validators import require_non_empty
from ..core.enums import AttendanceStatus
from ..core.exceptions import EmptyReason, SessionNotActive, SessionNotFound, ValidationError
from ..roster.repository import RosterProvider
from ..sessions.model import Session
from ..sessions.repository import SessionStore
from .model import SessionStats

logger = logging.getLogger(__name__)


class MarkingService:
    """Use case: operators marking attendance while the standup is active.

    Each call is a single field-level merge, so concurrent operators editing
    different participants never overwrite each other. Two edits of the same
    participant resolve to whichever write lands last.
    """

    def __init__(self, store: SessionStore, roster: RosterProvider):
        self._store = store
        self._roster = roster

    def set_status(
        self,
        session_date: date,
        participant_id: str,
        status: AttendanceStatus | str,
        *,
        operator: Optional[str] = None,
    ) -> Session:
        participant_id = require_non_empty(participant_id, "participant_id")
        try:
            status = AttendanceStatus(status)
        except ValueError as e:
            raise ValidationError(f"Unknown attendance status: {status}") from e

        if status == AttendanceStatus.NOT_AVAILABLE:
            raise EmptyReason("Marking a participant Not Available requires a reason")

        updated = self._store.merge_marks(
            session_date,
            attendance={participant_id: status},
            reasons={participant_id: None},
        )
        if updated is None:
            self._reject(session_date)

        logger.debug("Standup %s: %s marked %s by %s", updated.session_id, participant_id, status.value, operator or "-")
        return updated

    def set_unavailable(
        self,
        session_date: date,
        participant_id: str,
        reason: Optional[str],
        *,
        operator: Optional[str] = None,
    ) -> Session:
        participant_id = require_non_empty(participant_id, "participant_id")
        reason = require_non_empty(reason, "reason", error=EmptyReason)

        updated = self._store.merge_marks(
            session_date,
            attendance={participant_id: AttendanceStatus.NOT_AVAILABLE},
            reasons={participant_id: reason},
        )
        if updated is None:
            self._reject(session_date)

        logger.debug("Standup %s: %s marked Not Available by %s", updated.session_id, participant_id, operator or "-")
        return updated

    def live_stats(self, session_date: date) -> SessionStats:
        session = self._store.get(session_date)
        if session is None:
            raise SessionNotFound(f"No standup for {session_key(session_date)}")

        participants = self._roster.list_active_participants()
        counts = Counter(
            session.temp_attendance.get(p.participant_id, AttendanceStatus.MISSED) for p in participants
        )
        return SessionStats(
            session_id=session.session_id,
            total=len(participants),
            present=counts[AttendanceStatus.PRESENT],
            absent=counts[AttendanceStatus.ABSENT],
            missed=counts[AttendanceStatus.MISSED],
            not_available=counts[AttendanceStatus.NOT_AVAILABLE],
        )

    def _reject(self, session_date: date) -> NoReturn:
        current = self._store.get(session_date)
        if current is None:
            raise SessionNotFound(f"No standup for {session_key(session_date)}")
        raise SessionNotActive(f"Standup {current.session_id} is {current.status.value}; attendance is closed")
