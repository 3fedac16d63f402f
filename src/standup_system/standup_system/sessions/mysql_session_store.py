from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

import mysql.connector

from ..core.enums import AttendanceStatus, SessionStatus
from ..core.exceptions import BatchWriteFailed, StoreUnavailable
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, json_path_for_key, load_json_map
from ..ledger.model import AttendanceRecord
from .events import ChangeHub, SessionListener
from .model import Session, SessionChange
from .repository import RecordBuilder, SessionStore

logger = logging.getLogger(__name__)

_SESSION_COLUMNS = (
    "session_date, status, scheduled_time, scheduled_by, started_at, ended_at, temp_attendance, absence_reasons"
)
_TIMESTAMP_FIELDS = {"started_at", "ended_at"}
_MAP_FIELDS = {"temp_attendance", "absence_reasons"}


def _row_to_session(r: Dict[str, Any]) -> Session:
    return Session(
        session_date=r["session_date"],
        status=SessionStatus(r["status"]),
        scheduled_time=r["scheduled_time"],
        scheduled_by=r["scheduled_by"],
        started_at=r.get("started_at"),
        ended_at=r.get("ended_at"),
        temp_attendance={k: AttendanceStatus(v) for k, v in load_json_map(r.get("temp_attendance")).items()},
        absence_reasons={k: str(v) for k, v in load_json_map(r.get("absence_reasons")).items()},
    )


def _row_to_record(r: Dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        record_id=r["record_id"],
        session_id=r["session_date"].isoformat(),
        participant_id=str(r["participant_id"]),
        participant_name=r["participant_name"],
        participant_email=r.get("participant_email") or "",
        employee_code=r.get("employee_code") or "",
        status=AttendanceStatus(r["status"]),
        scheduled_at=r["scheduled_at"],
        finalized_at=r["finalized_at"],
        reason=r.get("reason"),
    )


class MySQLSessionStore(SessionStore):
    """Session store on MySQL.

    Writers on the same day serialise on the session row (SELECT ... FOR UPDATE)
    and map fields are changed member by member with JSON_SET / JSON_REMOVE.
    Change events reach subscribers in this process only; other processes
    observe changes by reading. Driver errors surface as StoreUnavailable, or
    as BatchWriteFailed from the finalize commit.
    """

    def __init__(self, conn_factory: DatabaseConnection, hub: Optional[ChangeHub] = None):
        self._conn_factory = conn_factory
        self._hub = hub or ChangeHub()

    @contextmanager
    def _cursor(self, action: str):
        try:
            with db_cursor(self._conn_factory) as (conn, cur):
                yield conn, cur
        except mysql.connector.Error as e:
            logger.warning("Standup store %s failed: %s", action, e)
            raise StoreUnavailable(f"Standup store is temporarily unavailable ({action})") from e

    def _select_session(self, cur, session_date: date, *, for_update: bool = False) -> Optional[Session]:
        cur.execute(
            f"SELECT {_SESSION_COLUMNS} FROM standups WHERE session_date=%s" + (" FOR UPDATE" if for_update else ""),
            (session_date,),
        )
        r = fetchone(cur)
        return _row_to_session(r) if r else None

    def get(self, session_date: date) -> Optional[Session]:
        with self._cursor("read") as (_, cur):
            return self._select_session(cur, session_date)

    def list_by_status(self, status: SessionStatus) -> Sequence[Session]:
        with self._cursor("list") as (_, cur):
            cur.execute(
                f"SELECT {_SESSION_COLUMNS} FROM standups WHERE status=%s ORDER BY session_date ASC",
                (status.value,),
            )
            return [_row_to_session(r) for r in fetchall(cur)]

    def put_schedule(
        self,
        session_date: date,
        *,
        scheduled_time: datetime,
        scheduled_by: str,
        create_only: bool = False,
    ) -> Optional[Session]:
        with self._cursor("schedule") as (_, cur):
            current = self._select_session(cur, session_date, for_update=True)
            if current is None:
                cur.execute(
                    """
                    INSERT INTO standups(session_date, status, scheduled_time, scheduled_by, temp_attendance, absence_reasons)
                    VALUES(%s, %s, %s, %s, JSON_OBJECT(), JSON_OBJECT())
                    """,
                    (session_date, SessionStatus.SCHEDULED.value, scheduled_time, scheduled_by),
                )
            elif create_only or current.status != SessionStatus.SCHEDULED:
                return None
            else:
                cur.execute(
                    "UPDATE standups SET scheduled_time=%s, scheduled_by=%s WHERE session_date=%s",
                    (scheduled_time, scheduled_by, session_date),
                )
            updated = self._select_session(cur, session_date)

        self._publish(
            updated,
            "scheduled",
            {"status": updated.status, "scheduled_time": scheduled_time, "scheduled_by": scheduled_by},
        )
        return updated

    def compare_and_set_status(
        self,
        session_date: date,
        *,
        expected: SessionStatus,
        new: SessionStatus,
        fields: Mapping[str, Any],
    ) -> Optional[Session]:
        unknown = set(fields) - _TIMESTAMP_FIELDS - _MAP_FIELDS
        if unknown:
            raise ValueError(f"Unsupported session fields: {sorted(unknown)}")

        assignments = ["status=%s"]
        params: List[object] = [new.value]
        for name, value in fields.items():
            if name in _MAP_FIELDS:
                assignments.append(f"{name}=CAST(%s AS JSON)")
                params.append(json.dumps({k: getattr(v, "value", v) for k, v in dict(value).items()}))
            else:
                assignments.append(f"{name}=%s")
                params.append(value)

        with self._cursor("status change") as (_, cur):
            current = self._select_session(cur, session_date, for_update=True)
            if current is None or current.status != expected:
                return None
            cur.execute(
                f"UPDATE standups SET {', '.join(assignments)} WHERE session_date=%s AND status=%s",
                tuple(params) + (session_date, expected.value),
            )
            updated = self._select_session(cur, session_date)

        self._publish(updated, new.value, {"status": new, **dict(fields)})
        return updated

    def merge_marks(
        self,
        session_date: date,
        *,
        attendance: Mapping[str, AttendanceStatus],
        reasons: Mapping[str, Optional[str]],
    ) -> Optional[Session]:
        assignments: List[str] = []
        params: List[object] = []

        if attendance:
            pairs = ", ".join(["%s, %s"] * len(attendance))
            assignments.append(f"temp_attendance=JSON_SET(COALESCE(temp_attendance, JSON_OBJECT()), {pairs})")
            for participant_id, status in attendance.items():
                params.extend([json_path_for_key(participant_id), AttendanceStatus(status).value])

        to_set = {k: v for k, v in reasons.items() if v is not None}
        to_remove = [k for k, v in reasons.items() if v is None]
        if to_set or to_remove:
            expr = "COALESCE(absence_reasons, JSON_OBJECT())"
            if to_set:
                expr = f"JSON_SET({expr}, {', '.join(['%s, %s'] * len(to_set))})"
                for participant_id, reason in to_set.items():
                    params.extend([json_path_for_key(participant_id), reason])
            if to_remove:
                expr = f"JSON_REMOVE({expr}, {', '.join(['%s'] * len(to_remove))})"
                params.extend(json_path_for_key(participant_id) for participant_id in to_remove)
            assignments.append(f"absence_reasons={expr}")

        if not assignments:
            return self.get(session_date)

        with self._cursor("merge") as (_, cur):
            current = self._select_session(cur, session_date, for_update=True)
            if current is None or current.status != SessionStatus.ACTIVE:
                return None
            cur.execute(
                f"UPDATE standups SET {', '.join(assignments)} WHERE session_date=%s",
                tuple(params) + (session_date,),
            )
            updated = self._select_session(cur, session_date)

        self._publish(updated, "marked", {"temp_attendance": dict(attendance), "absence_reasons": dict(reasons)})
        return updated

    def commit_finalize(
        self,
        session_date: date,
        *,
        ended_at: datetime,
        build_records: RecordBuilder,
    ) -> Optional[Tuple[Session, Sequence[AttendanceRecord]]]:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                current = self._select_session(cur, session_date, for_update=True)
                if current is None or current.status != SessionStatus.ACTIVE:
                    return None

                records = list(build_records(current))
                if records:
                    cur.executemany(
                        """
                        INSERT INTO standup_attendance(
                            record_id, session_date, participant_id, participant_name, participant_email,
                            employee_code, status, scheduled_at, finalized_at, reason
                        )
                        VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                        """,
                        [
                            (
                                r.record_id,
                                session_date,
                                r.participant_id,
                                r.participant_name,
                                r.participant_email,
                                r.employee_code,
                                r.status.value,
                                r.scheduled_at,
                                r.finalized_at,
                                r.reason,
                            )
                            for r in records
                        ],
                    )
                cur.execute(
                    "UPDATE standups SET status=%s, ended_at=%s WHERE session_date=%s AND status=%s",
                    (SessionStatus.ENDED.value, ended_at, session_date, SessionStatus.ACTIVE.value),
                )
                ended = self._select_session(cur, session_date)
        except mysql.connector.Error as e:
            logger.warning("Finalize batch for %s rolled back: %s", session_date.isoformat(), e)
            raise BatchWriteFailed(f"Could not write attendance for {session_date.isoformat()}") from e

        self._publish(ended, SessionStatus.ENDED.value, {"status": SessionStatus.ENDED, "ended_at": ended_at})
        return ended, records

    def list_for_session(self, session_date: date) -> Sequence[AttendanceRecord]:
        with self._cursor("ledger read") as (_, cur):
            cur.execute(
                """
                SELECT record_id, session_date, participant_id, participant_name, participant_email,
                       employee_code, status, scheduled_at, finalized_at, reason
                FROM standup_attendance
                WHERE session_date=%s
                ORDER BY participant_name ASC, participant_id ASC
                """,
                (session_date,),
            )
            return [_row_to_record(r) for r in fetchall(cur)]

    def subscribe(self, session_date: date, listener: SessionListener) -> Callable[[], None]:
        return self._hub.subscribe(session_date, listener)

    def _publish(self, session: Session, kind: str, delta: Mapping[str, Any]) -> None:
        self._hub.publish(SessionChange(session_date=session.session_date, kind=kind, delta=delta, session=session))
