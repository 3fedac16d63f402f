from __future__ import annotations

from collections import Counter
from datetime import date
from typing import Sequence

from ..common.datetime_utils import session_key
from ..core.enums import AttendanceStatus
from .model import AttendanceRecord, AttendanceSummary
from .repository import LedgerRepository


class LedgerService:
    """Use case: read-only access to finalized attendance for reporting views."""

    def __init__(self, ledger: LedgerRepository):
        self._ledger = ledger

    def list_for_session(self, session_date: date) -> Sequence[AttendanceRecord]:
        return sorted(self._ledger.list_for_session(session_date), key=lambda r: (r.participant_name, r.participant_id))

    def summary(self, session_date: date) -> AttendanceSummary:
        records = self._ledger.list_for_session(session_date)
        counts = Counter(r.status for r in records)
        return AttendanceSummary(
            session_id=session_key(session_date),
            total=len(records),
            present=counts[AttendanceStatus.PRESENT],
            absent=counts[AttendanceStatus.ABSENT],
            missed=counts[AttendanceStatus.MISSED],
            not_available=counts[AttendanceStatus.NOT_AVAILABLE],
        )
