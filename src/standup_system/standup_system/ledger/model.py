from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus


def record_id_for(session_date: date, participant_id: str) -> str:
    """Deterministic ledger key: one record per (session, participant)."""
    return f"{session_date.isoformat()}_{participant_id}"


@dataclass(frozen=True)
class AttendanceRecord:
    """Finalized, write-once attendance entry for one participant in one session."""

    record_id: str
    session_id: str
    participant_id: str
    participant_name: str
    participant_email: str
    employee_code: str
    status: AttendanceStatus
    scheduled_at: datetime
    finalized_at: datetime
    reason: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "record_id": self.record_id,
            "session_id": self.session_id,
            "participant_id": self.participant_id,
            "participant_name": self.participant_name,
            "participant_email": self.participant_email,
            "employee_code": self.employee_code,
            "status": self.status.value,
            "scheduled_at": self.scheduled_at.isoformat(),
            "finalized_at": self.finalized_at.isoformat(),
            "reason": self.reason,
        }


@dataclass(frozen=True)
class AttendanceSummary:
    """Read-model for the summary view of an ended session."""

    session_id: str
    total: int
    present: int
    absent: int
    missed: int
    not_available: int

    def to_dict(self) -> dict:
        return {
            "session_id": self.session_id,
            "total": self.total,
            "present": self.present,
            "absent": self.absent,
            "missed": self.missed,
            "not_available": self.not_available,
        }
