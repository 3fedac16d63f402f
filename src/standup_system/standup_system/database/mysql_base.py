from __future__ import annotations

import json
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def json_path_for_key(key: str) -> str:
    """Build a MySQL JSON path addressing one object member.

    Keys are quoted so ids containing dots or spaces address a single member.
    """

    return "$." + json.dumps(str(key))


def load_json_map(value: Any) -> Dict[str, Any]:
    """Normalize a MySQL JSON column across connector implementations.

    mysql-connector can return JSON as:
    - str
    - bytes / bytearray
    - dict (C extension with some server versions)
    """

    if value is None:
        return {}

    if isinstance(value, dict):
        return dict(value)

    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")

    if isinstance(value, str):
        if not value.strip():
            return {}
        loaded = json.loads(value)
        if not isinstance(loaded, dict):
            raise ValueError(f"Expected a JSON object, got {type(loaded).__name__}")
        return loaded

    raise TypeError(f"Unsupported MySQL JSON value type: {type(value)!r}")
