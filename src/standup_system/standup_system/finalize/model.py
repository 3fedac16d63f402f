from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from ..core.enums import FinalizeResult, FinalizeTrigger
from ..ledger.model import AttendanceRecord
from ..sessions.model import Session


@dataclass(frozen=True)
class FinalizeOutcome:
    """Result of closing a standup.

    A call that finds the session already ended returns ALREADY_FINALIZED
    together with the ledger committed by the earlier call.
    """

    result: FinalizeResult
    trigger: FinalizeTrigger
    session: Session
    records: Tuple[AttendanceRecord, ...]

    @property
    def already_finalized(self) -> bool:
        return self.result == FinalizeResult.ALREADY_FINALIZED

    def to_dict(self) -> dict:
        return {
            "result": self.result.value,
            "trigger": self.trigger.value,
            "session": self.session.to_dict(),
            "records": [r.to_dict() for r in self.records],
        }
