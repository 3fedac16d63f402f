from __future__ import annotations

from typing import Protocol, Sequence

from .model import Participant


class RosterProvider(Protocol):
    """Roster source consumed at activation and finalize time.

    Implementations return non-archived participants only and raise
    RosterUnavailable when the source cannot be read.
    """

    def list_active_participants(self) -> Sequence[Participant]:
        raise NotImplementedError
