from __future__ import annotations

import threading
from typing import Iterable, Sequence

from .model import Participant
from .repository import RosterProvider


class InMemoryRosterRepository(RosterProvider):
    """Roster held in process memory (tests, SESSION_STORE=memory)."""

    def __init__(self, participants: Iterable[Participant] = ()):
        self._lock = threading.Lock()
        self._by_id: dict[str, Participant] = {p.participant_id: p for p in participants}

    def list_active_participants(self) -> Sequence[Participant]:
        with self._lock:
            return [p for p in self._by_id.values() if not p.archived]

    def upsert(self, participant: Participant) -> None:
        with self._lock:
            self._by_id[participant.participant_id] = participant

    def set_archived(self, participant_id: str, *, archived: bool = True) -> bool:
        with self._lock:
            current = self._by_id.get(participant_id)
            if current is None:
                return False
            self._by_id[participant_id] = Participant(
                participant_id=current.participant_id,
                name=current.name,
                email=current.email,
                employee_code=current.employee_code,
                archived=archived,
            )
            return True
