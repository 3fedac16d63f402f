from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import List, Optional

from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_GRACE_PERIOD_MINUTES
from ..core.enums import FinalizeTrigger, SessionStatus
from ..core.exceptions import SessionNotActive, TransientStoreError
from ..finalize.model import FinalizeOutcome
from ..finalize.service import FinalizeService
from ..sessions.model import Session
from ..sessions.repository import SessionStore

logger = logging.getLogger(__name__)


class TimeoutWatcher:
    """Auto-closes active standups once scheduled_time + grace period has passed.

    Ticks may repeat freely: finalize is compare-and-swap guarded, so only the
    first successful call writes anything.
    """

    def __init__(
        self,
        store: SessionStore,
        finalizer: FinalizeService,
        *,
        grace_period: timedelta = timedelta(minutes=DEFAULT_GRACE_PERIOD_MINUTES),
        tz_name: Optional[str] = None,
    ):
        if grace_period <= timedelta(0):
            raise ValueError("grace_period must be positive")
        self._store = store
        self._finalizer = finalizer
        self._grace_period = grace_period
        self._tz_name = tz_name

    @property
    def grace_period(self) -> timedelta:
        return self._grace_period

    def deadline_for(self, session: Session) -> datetime:
        return session.deadline(self._grace_period)

    def tick(self, *, now: Optional[datetime] = None) -> List[FinalizeOutcome]:
        now = now or now_local(self._tz_name)
        outcomes: List[FinalizeOutcome] = []

        try:
            active = self._store.list_by_status(SessionStatus.ACTIVE)
        except TransientStoreError as e:
            logger.warning("Watcher could not list active standups, retrying next tick: %s", e)
            return outcomes

        for session in active:
            if now < self.deadline_for(session):
                continue
            try:
                outcome = self._finalizer.finalize(session.session_date, now=now, trigger=FinalizeTrigger.TIMEOUT)
            except TransientStoreError as e:
                logger.warning("Auto-close of standup %s failed, retrying next tick: %s", session.session_id, e)
                continue
            except SessionNotActive as e:
                logger.debug("Standup %s skipped by watcher: %s", session.session_id, e)
                continue

            if not outcome.already_finalized:
                logger.info(
                    "Standup %s auto-closed at %s (deadline %s)",
                    session.session_id,
                    now.strftime("%H:%M:%S"),
                    self.deadline_for(session).strftime("%H:%M"),
                )
            outcomes.append(outcome)
        return outcomes
