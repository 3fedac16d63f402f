from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Operator roles allowed to drive a standup."""

    ADMIN = "admin"
    CO_ADMIN = "co_admin"


class SessionStatus(str, Enum):
    """Lifecycle of the per-day standup session. Forward only."""

    SCHEDULED = "scheduled"
    ACTIVE = "active"
    ENDED = "ended"


class AttendanceStatus(str, Enum):
    PRESENT = "Present"
    ABSENT = "Absent"
    MISSED = "Missed"
    NOT_AVAILABLE = "Not Available"


class FinalizeTrigger(str, Enum):
    MANUAL = "manual"
    TIMEOUT = "timeout"


class FinalizeResult(str, Enum):
    """Outcome of a finalize call. ALREADY_FINALIZED is a normal result, not an error."""

    COMMITTED = "committed"
    ALREADY_FINALIZED = "already_finalized"
