from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Participant:
    """Roster snapshot entry for one employee.

    Note: The roster itself is owned by the employee directory; this is a read-only copy.
    """

    participant_id: str
    name: str
    email: str
    employee_code: str = ""
    archived: bool = False
