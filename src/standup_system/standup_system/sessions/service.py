from __future__ import annotations

import logging
from datetime import date, datetime, time
from typing import Callable, List, Optional

from ..common.datetime_utils import now_local, parse_hhmm, session_key, start_of_minute
from ..common.validators import require_non_empty
from ..core.constants import DEFAULT_STANDUP_TIME, SYSTEM_SCHEDULER
from ..core.enums import SessionStatus
from ..core.exceptions import InvalidTransition, SessionNotFound, TransientStoreError, ValidationError
from ..roster.repository import RosterProvider
from .events import SessionListener
from .model import Session
from .repository import SessionStore

logger = logging.getLogger(__name__)

SUNDAY = 6


class SessionService:
    """Use case: the scheduled -> active -> ended lifecycle of the daily standup.

    Every operation takes the session date explicitly; `now` defaults to the
    configured wall clock and is injectable for tests.
    """

    def __init__(
        self,
        store: SessionStore,
        roster: RosterProvider,
        *,
        default_time: time | str = DEFAULT_STANDUP_TIME,
        tz_name: Optional[str] = None,
    ):
        self._store = store
        self._roster = roster
        self._default_time = parse_hhmm(default_time) if isinstance(default_time, str) else default_time
        self._tz_name = tz_name

    def _now(self, now: Optional[datetime]) -> datetime:
        return now or now_local(self._tz_name)

    def query(self, session_date: date) -> Optional[Session]:
        return self._store.get(session_date)

    def require(self, session_date: date) -> Session:
        session = self._store.get(session_date)
        if session is None:
            raise SessionNotFound(f"No standup for {session_key(session_date)}")
        return session

    def subscribe(self, session_date: date, listener: SessionListener) -> Callable[[], None]:
        return self._store.subscribe(session_date, listener)

    def schedule(
        self,
        session_date: date,
        *,
        scheduled_time: datetime,
        scheduled_by: str,
        now: Optional[datetime] = None,
    ) -> Session:
        scheduled_by = require_non_empty(scheduled_by, "scheduled_by")
        existing = self._store.get(session_date)
        if existing is not None and existing.status != SessionStatus.SCHEDULED:
            raise InvalidTransition(f"Standup {existing.session_id} is already {existing.status.value}")

        scheduled_time = scheduled_time.replace(second=0, microsecond=0)
        if scheduled_time.date() != session_date:
            raise ValidationError("Scheduled time must fall on the session date")
        if scheduled_time < start_of_minute(self._now(now)):
            raise ValidationError("The standup cannot be scheduled in the past")

        written = self._store.put_schedule(session_date, scheduled_time=scheduled_time, scheduled_by=scheduled_by)
        if written is None:
            current = self.require(session_date)
            raise InvalidTransition(f"Standup {current.session_id} is already {current.status.value}")

        logger.info(
            "Standup %s %s for %s by %s",
            written.session_id,
            "rescheduled" if existing is not None else "scheduled",
            scheduled_time.strftime("%H:%M"),
            scheduled_by,
        )
        return written

    def schedule_daily(self, day: date, *, now: Optional[datetime] = None) -> Optional[Session]:
        """Automatic daily scheduling. Sundays are skipped and existing sessions are left alone."""

        if day.weekday() == SUNDAY:
            logger.info("Skipping standup scheduling on Sunday %s", session_key(day))
            return None

        scheduled_time = datetime.combine(day, self._default_time)
        written = self._store.put_schedule(
            day,
            scheduled_time=scheduled_time,
            scheduled_by=SYSTEM_SCHEDULER,
            create_only=True,
        )
        if written is None:
            logger.debug("Standup %s already exists; automatic schedule left it unchanged", session_key(day))
            return None

        logger.info("Standup %s scheduled automatically for %s", written.session_id, scheduled_time.strftime("%H:%M"))
        return written

    def activate(self, session_date: date, *, now: Optional[datetime] = None) -> Session:
        now = self._now(now)
        session = self.require(session_date)

        if session.status == SessionStatus.ACTIVE:
            logger.debug("Standup %s already active", session.session_id)
            return session
        if session.status == SessionStatus.ENDED:
            raise InvalidTransition(f"Standup {session.session_id} has already ended")
        if now < session.scheduled_time:
            raise InvalidTransition(
                f"Standup {session.session_id} is not due until {session.scheduled_time.strftime('%H:%M')}"
            )

        participants = self._roster.list_active_participants()

        updated = self._store.compare_and_set_status(
            session_date,
            expected=SessionStatus.SCHEDULED,
            new=SessionStatus.ACTIVE,
            fields={"started_at": now, "temp_attendance": {}, "absence_reasons": {}},
        )
        if updated is None:
            current = self.require(session_date)
            if current.status == SessionStatus.ACTIVE:
                return current
            raise InvalidTransition(f"Standup {current.session_id} is already {current.status.value}")

        logger.info("Standup %s active with %d participants", updated.session_id, len(participants))
        return updated

    def activate_due(self, *, now: Optional[datetime] = None) -> List[Session]:
        """Activation trigger: start every scheduled session whose time has come."""

        now = self._now(now)
        activated: List[Session] = []
        try:
            scheduled = self._store.list_by_status(SessionStatus.SCHEDULED)
        except TransientStoreError as e:
            logger.warning("Could not list scheduled standups, will retry: %s", e)
            return activated

        for session in scheduled:
            if session.scheduled_time > now:
                continue
            try:
                activated.append(self.activate(session.session_date, now=now))
            except TransientStoreError as e:
                logger.warning("Could not activate standup %s, will retry: %s", session.session_id, e)
            except InvalidTransition as e:
                logger.debug("Standup %s not activated: %s", session.session_id, e)
        return activated
