from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import ClosureReason
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_utc, db_cursor, fetchall, fetchone, to_db
from .model import AttendanceSession
from .repository import AttendanceRepository

_COLUMNS = "session_id, employee_id, location_id, clock_in_time, clock_out_time, closure_reason"


def _to_session(r) -> AttendanceSession:
    reason = r.get("closure_reason")
    return AttendanceSession(
        session_id=int(r["session_id"]),
        employee_id=int(r["employee_id"]),
        location_id=int(r["location_id"]),
        clock_in_time=as_utc(r["clock_in_time"]),
        clock_out_time=as_utc(r.get("clock_out_time")),
        closure_reason=ClosureReason(reason) if reason else None,
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, session_id: int) -> Optional[AttendanceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_sessions WHERE session_id=%s", (int(session_id),))
            r = fetchone(cur)
            return _to_session(r) if r else None

    def get_open_for_employee(self, employee_id: int) -> Optional[AttendanceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_sessions
                WHERE employee_id=%s AND clock_out_time IS NULL
                ORDER BY clock_in_time DESC
                LIMIT 1
                """,
                (int(employee_id),),
            )
            r = fetchone(cur)
            return _to_session(r) if r else None

    def list_open(self) -> Sequence[AttendanceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_sessions
                WHERE clock_out_time IS NULL
                ORDER BY clock_in_time, session_id
                """
            )
            return [_to_session(r) for r in fetchall(cur)]

    def list_in_range(
        self,
        *,
        start: datetime,
        end: datetime,
        employee_id: Optional[int] = None,
    ) -> Sequence[AttendanceSession]:
        clauses = ["clock_in_time BETWEEN %s AND %s"]
        params: list[object] = [to_db(start), to_db(end)]
        if employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(int(employee_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_sessions
                WHERE {" AND ".join(clauses)}
                ORDER BY clock_in_time, session_id
                """,
                tuple(params),
            )
            return [_to_session(r) for r in fetchall(cur)]

    def create_clock_in(self, *, employee_id: int, location_id: int, clock_in_time: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_sessions(employee_id, location_id, clock_in_time)
                VALUES(%s,%s,%s)
                """,
                (employee_id, location_id, to_db(clock_in_time)),
            )
            return int(cur.lastrowid)

    def close_if_open(self, *, session_id: int, clock_out_time: datetime, reason: ClosureReason) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_sessions
                SET clock_out_time=%s, closure_reason=%s
                WHERE session_id=%s AND clock_out_time IS NULL
                """,
                (to_db(clock_out_time), reason.value, int(session_id)),
            )
            return cur.rowcount > 0
