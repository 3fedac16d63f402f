from __future__ import annotations

from datetime import date, datetime
from typing import Any, Callable, Mapping, Optional, Protocol, Sequence, Tuple

from ..core.enums import AttendanceStatus, SessionStatus
from ..ledger.model import AttendanceRecord
from .events import SessionListener
from .model import Session

RecordBuilder = Callable[[Session], Sequence[AttendanceRecord]]


class SessionStore(Protocol):
    """Persistence primitives for the per-day session document and its ledger.

    Every write is conditional and touches only the named fields or map
    members; none of them replaces the whole document. Conditional writes
    return None when their precondition does not hold, so the caller can
    re-read and report the precise reason.
    """

    def get(self, session_date: date) -> Optional[Session]:
        raise NotImplementedError

    def list_by_status(self, status: SessionStatus) -> Sequence[Session]:
        raise NotImplementedError

    def put_schedule(
        self,
        session_date: date,
        *,
        scheduled_time: datetime,
        scheduled_by: str,
        create_only: bool = False,
    ) -> Optional[Session]:
        """Create the session, or reschedule it while it is still scheduled.

        With create_only=True an existing document is left untouched.
        """

        raise NotImplementedError

    def compare_and_set_status(
        self,
        session_date: date,
        *,
        expected: SessionStatus,
        new: SessionStatus,
        fields: Mapping[str, Any],
    ) -> Optional[Session]:
        raise NotImplementedError

    def merge_marks(
        self,
        session_date: date,
        *,
        attendance: Mapping[str, AttendanceStatus],
        reasons: Mapping[str, Optional[str]],
    ) -> Optional[Session]:
        """Field-level merge into the attendance maps, only while active.

        A reason value of None removes that participant's reason.
        """

        raise NotImplementedError

    def commit_finalize(
        self,
        session_date: date,
        *,
        ended_at: datetime,
        build_records: RecordBuilder,
    ) -> Optional[Tuple[Session, Sequence[AttendanceRecord]]]:
        """Atomically swap active -> ended and write the ledger batch.

        build_records receives the session as locked for the swap and runs
        only for the caller that wins it; an exception it raises aborts the
        step with nothing written. Returns None when the session was no
        longer active. Raises BatchWriteFailed
        with nothing persisted when the batch cannot be written.
        """

        raise NotImplementedError

    def list_for_session(self, session_date: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def subscribe(self, session_date: date, listener: SessionListener) -> Callable[[], None]:
        raise NotImplementedError
