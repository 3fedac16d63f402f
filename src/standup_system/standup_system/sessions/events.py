from __future__ import annotations

import logging
import threading
from datetime import date
from typing import Callable, Dict, List

from .model import SessionChange

logger = logging.getLogger(__name__)

SessionListener = Callable[[SessionChange], None]


class ChangeHub:
    """In-process pub/sub for session document changes, keyed by session date."""

    def __init__(self):
        self._lock = threading.Lock()
        self._listeners: Dict[date, List[SessionListener]] = {}

    def subscribe(self, session_date: date, listener: SessionListener) -> Callable[[], None]:
        with self._lock:
            self._listeners.setdefault(session_date, []).append(listener)

        def unsubscribe() -> None:
            with self._lock:
                listeners = self._listeners.get(session_date, [])
                if listener in listeners:
                    listeners.remove(listener)
                if not listeners:
                    self._listeners.pop(session_date, None)

        return unsubscribe

    def publish(self, change: SessionChange) -> None:
        with self._lock:
            listeners = list(self._listeners.get(change.session_date, []))

        for listener in listeners:
            try:
                listener(change)
            except Exception:
                logger.exception("Session listener failed for %s (%s)", change.session.session_id, change.kind)
