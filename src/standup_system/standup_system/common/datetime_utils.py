from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Optional
from zoneinfo import ZoneInfo


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_hhmm(value: str) -> time:
    """Parse a 24h HH:MM string into time."""
    return datetime.strptime(value.strip(), "%H:%M").time()


def session_key(session_date: date) -> str:
    """Document key of the standup for a calendar day."""
    return session_date.isoformat()


def now_local(tz_name: Optional[str] = None) -> datetime:
    """Current wall-clock time as a naive datetime.

    Note: Wrapped so tests can patch/mocked easier.
    """
    if tz_name:
        return datetime.now(ZoneInfo(tz_name)).replace(tzinfo=None)
    return datetime.now()


def start_of_minute(value: datetime) -> datetime:
    return value.replace(second=0, microsecond=0)


def format_elapsed(delta: timedelta) -> str:
    """Render a running session clock as MM:SS, or HH:MM:SS past the hour."""
    seconds = max(int(delta.total_seconds()), 0)
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    if hours > 0:
        return f"{hours:02d}:{minutes:02d}:{secs:02d}"
    return f"{minutes:02d}:{secs:02d}"
