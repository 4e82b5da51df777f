from datetime import datetime, time, timedelta, timezone

import mysql.connector
import pytest

from shiftclock.core.exceptions import PersistenceError
from shiftclock.database.bootstrap import split_statements
from shiftclock.database.mysql_base import as_utc, db_cursor, normalize_mysql_time, to_db


class FakeCursor:
    def __init__(self, fail_with=None):
        self.closed = False
        self._fail_with = fail_with

    def execute(self, sql, params=None):
        if self._fail_with:
            raise self._fail_with

    def close(self):
        self.closed = True


class FakeConnection:
    def __init__(self, cursor):
        self._cursor = cursor
        self.committed = False
        self.rolled_back = False
        self.closed = False

    def cursor(self, dictionary=True):
        return self._cursor

    def commit(self):
        self.committed = True

    def rollback(self):
        self.rolled_back = True

    def close(self):
        self.closed = True


class FakeFactory:
    def __init__(self, conn):
        self._conn = conn

    def connect(self):
        return self._conn


def test_db_cursor_commits_on_success():
    conn = FakeConnection(FakeCursor())

    with db_cursor(FakeFactory(conn)) as (_, cur):
        cur.execute("SELECT 1")

    assert conn.committed and conn.closed and not conn.rolled_back


def test_db_cursor_wraps_driver_errors_and_rolls_back():
    conn = FakeConnection(FakeCursor(fail_with=mysql.connector.Error("deadlock")))

    with pytest.raises(PersistenceError) as exc:
        with db_cursor(FakeFactory(conn)) as (_, cur):
            cur.execute("UPDATE x SET y=1")

    assert exc.value.retryable
    assert conn.rolled_back and not conn.committed and conn.closed


def test_db_cursor_rolls_back_on_other_errors():
    conn = FakeConnection(FakeCursor())

    with pytest.raises(KeyError):
        with db_cursor(FakeFactory(conn)):
            raise KeyError("boom")

    assert conn.rolled_back and conn.closed


def test_utc_conversion_round_trip_for_datetime_columns():
    aware = datetime(2024, 1, 8, 9, 0, tzinfo=timezone(timedelta(hours=-5)))

    stored = to_db(aware)

    assert stored == datetime(2024, 1, 8, 14, 0)
    assert as_utc(stored) == aware
    assert to_db(None) is None and as_utc(None) is None


@pytest.mark.parametrize(
    "value, expected",
    [
        (time(8, 30), time(8, 30)),
        (timedelta(hours=17, minutes=45), time(17, 45)),
        ("09:15:30", time(9, 15, 30)),
        (None, None),
    ],
)
def test_normalize_mysql_time(value, expected):
    assert normalize_mysql_time(value) == expected


def test_split_statements_ignores_comments_and_quoted_semicolons():
    sql = """
    -- header; comment
    CREATE TABLE a (id INT);
    INSERT INTO a VALUES (1), ('x;y');
    """

    assert list(split_statements(sql)) == [
        "CREATE TABLE a (id INT)",
        "INSERT INTO a VALUES (1), ('x;y')",
    ]
