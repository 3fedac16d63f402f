from __future__ import annotations

import pytest

from src.standup_system.standup_system.database.bootstrap import iter_sql_statements
from src.standup_system.standup_system.database.mysql_base import json_path_for_key, load_json_map


def test_iter_sql_statements_splits_on_semicolons():
    sql = "CREATE TABLE a (x INT);\nINSERT INTO a VALUES (1);\n"
    assert list(iter_sql_statements(sql)) == ["CREATE TABLE a (x INT)", "INSERT INTO a VALUES (1)"]


def test_iter_sql_statements_keeps_quoted_semicolons():
    sql = "INSERT INTO t VALUES ('a;b');SELECT \"x;y\""
    assert list(iter_sql_statements(sql)) == ["INSERT INTO t VALUES ('a;b')", 'SELECT "x;y"']


def test_json_path_quotes_member_names():
    assert json_path_for_key("E1") == '$."E1"'
    assert json_path_for_key("a.b") == '$."a.b"'


@pytest.mark.parametrize(
    "raw,expected",
    [
        (None, {}),
        ("", {}),
        ('{"E1": "Present"}', {"E1": "Present"}),
        (b'{"E2": "Absent"}', {"E2": "Absent"}),
        ({"E3": "Missed"}, {"E3": "Missed"}),
    ],
)
def test_load_json_map(raw, expected):
    assert load_json_map(raw) == expected


def test_load_json_map_rejects_arrays():
    with pytest.raises(ValueError):
        load_json_map("[1, 2]")
