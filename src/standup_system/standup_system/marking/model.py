from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SessionStats:
    """Live counters for an active standup. Unmarked participants count as missed."""

    session_id: str
    total: int
    present: int
    absent: int
    missed: int
    not_available: int

    @property
    def marked(self) -> int:
        return self.total - self.missed

    def to_dict(self) -> dict:
        return {
            "session_id": self.session_id,
            "total": self.total,
            "present": self.present,
            "absent": self.absent,
            "missed": self.missed,
            "not_available": self.not_available,
        }
