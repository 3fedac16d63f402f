from __future__ import annotations

import logging
from typing import Sequence

import mysql.connector

from ..core.exceptions import RosterUnavailable
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import Participant
from .repository import RosterProvider

logger = logging.getLogger(__name__)


class MySQLRosterRepository(RosterProvider):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_active_participants(self) -> Sequence[Participant]:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    SELECT participant_id, name, email, employee_code, archived
                    FROM employees
                    WHERE archived=0
                    ORDER BY name ASC, participant_id ASC
                    """
                )
                rows = fetchall(cur)
        except mysql.connector.Error as e:
            logger.warning("Roster read failed: %s", e)
            raise RosterUnavailable("Roster is temporarily unavailable") from e

        return [
            Participant(
                participant_id=str(r["participant_id"]),
                name=r["name"],
                email=r.get("email") or "",
                employee_code=r.get("employee_code") or "",
                archived=bool(r.get("archived", False)),
            )
            for r in rows
        ]
