from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from types import MappingProxyType
from typing import Any, Mapping, Optional

from ..common.datetime_utils import format_elapsed, session_key
from ..core.enums import AttendanceStatus, SessionStatus


@dataclass(frozen=True)
class Session:
    """Domain entity: the standup document for one calendar day.

    Instances are read-only snapshots; the maps are exposed as read-only views.
    """

    session_date: date
    status: SessionStatus
    scheduled_time: datetime
    scheduled_by: str
    started_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None
    temp_attendance: Mapping[str, AttendanceStatus] = field(default_factory=dict)
    absence_reasons: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "temp_attendance", MappingProxyType(dict(self.temp_attendance)))
        object.__setattr__(self, "absence_reasons", MappingProxyType(dict(self.absence_reasons)))

    @property
    def session_id(self) -> str:
        return session_key(self.session_date)

    def deadline(self, grace_period: timedelta) -> datetime:
        return self.scheduled_time + grace_period

    def elapsed(self, now: datetime) -> Optional[timedelta]:
        if self.started_at is None:
            return None
        end = self.ended_at or now
        return end - self.started_at

    def to_dict(self, *, now: Optional[datetime] = None) -> dict:
        data: dict[str, Any] = {
            "session_id": self.session_id,
            "status": self.status.value,
            "scheduled_time": self.scheduled_time.isoformat(),
            "scheduled_by": self.scheduled_by,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "ended_at": self.ended_at.isoformat() if self.ended_at else None,
            "temp_attendance": {k: v.value for k, v in self.temp_attendance.items()},
            "absence_reasons": dict(self.absence_reasons),
        }
        if now is not None:
            elapsed = self.elapsed(now)
            data["elapsed"] = format_elapsed(elapsed) if elapsed is not None else None
        return data


@dataclass(frozen=True)
class SessionChange:
    """Change event pushed to subscribers after every successful write.

    `delta` holds only the fields (or map members) touched by the write; a
    value of None inside a map delta means the member was removed.
    """

    session_date: date
    kind: str
    delta: Mapping[str, Any]
    session: Session
