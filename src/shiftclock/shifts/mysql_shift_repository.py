from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import ShiftStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_utc, db_cursor, fetchall, fetchone, normalize_mysql_time, to_db
from .model import ShiftBatch, ShiftInstance, ShiftTemplate
from .repository import ShiftInstanceRepository, ShiftTemplateRepository

_TEMPLATE_COLUMNS = """
    template_id, series_id, employee_id, location_id, weekday,
    start_time, end_time, effective_from, effective_until
"""

_INSTANCE_COLUMNS = """
    instance_id, employee_id, location_id, work_date, start_time, end_time,
    series_id, status, updated_at
"""


def _to_template(r) -> ShiftTemplate:
    return ShiftTemplate(
        template_id=int(r["template_id"]),
        series_id=r["series_id"],
        employee_id=int(r["employee_id"]),
        location_id=int(r["location_id"]),
        weekday=int(r["weekday"]),
        start_time=normalize_mysql_time(r["start_time"]),
        end_time=normalize_mysql_time(r["end_time"]),
        effective_from=r["effective_from"],
        effective_until=r.get("effective_until"),
    )


def _to_instance(r) -> ShiftInstance:
    return ShiftInstance(
        instance_id=int(r["instance_id"]),
        employee_id=int(r["employee_id"]),
        location_id=int(r["location_id"]),
        work_date=r["work_date"],
        start_time=as_utc(r["start_time"]),
        end_time=as_utc(r["end_time"]),
        series_id=r.get("series_id"),
        status=ShiftStatus(r["status"]),
        updated_at=as_utc(r.get("updated_at")),
    )


class MySQLShiftTemplateRepository(ShiftTemplateRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_for_range(self, *, start: date, end: date, employee_id: Optional[int] = None) -> Sequence[ShiftTemplate]:
        clauses = ["effective_from <= %s", "(effective_until IS NULL OR effective_until >= %s)"]
        params: list[object] = [end, start]
        if employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(int(employee_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_TEMPLATE_COLUMNS}
                FROM shift_templates
                WHERE {" AND ".join(clauses)}
                ORDER BY template_id
                """,
                tuple(params),
            )
            # retired templates (until < from) never overlap anything
            return [t for t in map(_to_template, fetchall(cur)) if t.overlaps(start, end)]

    def get_by_series(self, *, series_id: str) -> Optional[ShiftTemplate]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_TEMPLATE_COLUMNS} FROM shift_templates WHERE series_id=%s",
                (series_id,),
            )
            r = fetchone(cur)
            return _to_template(r) if r else None

    def create(
        self,
        *,
        series_id: str,
        employee_id: int,
        location_id: int,
        weekday: int,
        start_time,
        end_time,
        effective_from: date,
        effective_until: Optional[date] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO shift_templates(
                    series_id, employee_id, location_id, weekday,
                    start_time, end_time, effective_from, effective_until
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (series_id, employee_id, location_id, weekday, start_time, end_time, effective_from, effective_until),
            )
            return int(cur.lastrowid)


class MySQLShiftInstanceRepository(ShiftInstanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_in_range(self, *, start: date, end: date, employee_id: Optional[int] = None) -> Sequence[ShiftInstance]:
        clauses = ["work_date BETWEEN %s AND %s"]
        params: list[object] = [start, end]
        if employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(int(employee_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_INSTANCE_COLUMNS}
                FROM shift_instances
                WHERE {" AND ".join(clauses)}
                ORDER BY work_date, start_time, instance_id
                """,
                tuple(params),
            )
            return [_to_instance(r) for r in fetchall(cur)]

    def list_by_series(self, *, series_id: str, from_date: Optional[date] = None) -> Sequence[ShiftInstance]:
        clauses = ["series_id=%s"]
        params: list[object] = [series_id]
        if from_date is not None:
            clauses.append("work_date >= %s")
            params.append(from_date)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_INSTANCE_COLUMNS}
                FROM shift_instances
                WHERE {" AND ".join(clauses)}
                ORDER BY work_date, instance_id
                """,
                tuple(params),
            )
            return [_to_instance(r) for r in fetchall(cur)]

    def get_by_id(self, instance_id: int) -> Optional[ShiftInstance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_INSTANCE_COLUMNS} FROM shift_instances WHERE instance_id=%s",
                (int(instance_id),),
            )
            r = fetchone(cur)
            return _to_instance(r) if r else None

    def apply_batch(self, batch: ShiftBatch) -> list[int]:
        created: list[int] = []
        with db_cursor(self._conn_factory) as (_, cur):
            for inst in batch.creates:
                cur.execute(
                    """
                    INSERT INTO shift_instances(
                        employee_id, location_id, work_date, start_time, end_time, series_id, status
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        inst.employee_id,
                        inst.location_id,
                        inst.work_date,
                        to_db(inst.start_time),
                        to_db(inst.end_time),
                        inst.series_id,
                        inst.status.value,
                    ),
                )
                created.append(int(cur.lastrowid))

            for inst in batch.updates:
                cur.execute(
                    """
                    UPDATE shift_instances
                    SET location_id=%s, work_date=%s, start_time=%s, end_time=%s, status=%s,
                        updated_at=COALESCE(%s, CURRENT_TIMESTAMP(6))
                    WHERE instance_id=%s
                    """,
                    (
                        inst.location_id,
                        inst.work_date,
                        to_db(inst.start_time),
                        to_db(inst.end_time),
                        inst.status.value,
                        to_db(inst.updated_at),
                        inst.instance_id,
                    ),
                )

            if batch.deletes:
                placeholders = ",".join(["%s"] * len(batch.deletes))
                cur.execute(
                    f"DELETE FROM shift_instances WHERE instance_id IN ({placeholders})",
                    tuple(int(i) for i in batch.deletes),
                )

            for term in batch.terminations:
                cur.execute(
                    "UPDATE shift_templates SET effective_until=%s WHERE series_id=%s",
                    (term.effective_until, term.series_id),
                )
        return created
