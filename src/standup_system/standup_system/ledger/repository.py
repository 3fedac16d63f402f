from __future__ import annotations

from datetime import date
from typing import Protocol, Sequence

from .model import AttendanceRecord


class LedgerRepository(Protocol):
    """Read side of the attendance ledger. Records are only written by finalize."""

    def list_for_session(self, session_date: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError
