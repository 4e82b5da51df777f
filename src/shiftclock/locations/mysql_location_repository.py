from __future__ import annotations

from collections import defaultdict
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time
from .model import DayHours, LocationProfile
from .repository import LocationRepository


def _to_location(r, hours: dict[int, DayHours]) -> LocationProfile:
    return LocationProfile(
        location_id=int(r["location_id"]),
        name=r["name"],
        latitude=float(r["latitude"]) if r.get("latitude") is not None else None,
        longitude=float(r["longitude"]) if r.get("longitude") is not None else None,
        geofence_radius_m=int(r.get("geofence_radius_m") or 0),
        operating_hours=hours,
    )


def _to_hours(r) -> DayHours:
    return DayHours(
        is_open=bool(r["is_open"]),
        open_time=normalize_mysql_time(r.get("open_time")),
        close_time=normalize_mysql_time(r.get("close_time")),
    )


class MySQLLocationRepository(LocationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[LocationProfile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT location_id, name, latitude, longitude, geofence_radius_m
                FROM locations
                ORDER BY name, location_id
                """
            )
            rows = fetchall(cur)
            cur.execute("SELECT location_id, weekday, is_open, open_time, close_time FROM location_hours")
            hours: dict[int, dict[int, DayHours]] = defaultdict(dict)
            for h in fetchall(cur):
                hours[int(h["location_id"])][int(h["weekday"])] = _to_hours(h)
            return [_to_location(r, hours.get(int(r["location_id"]), {})) for r in rows]

    def get_by_id(self, location_id: int) -> Optional[LocationProfile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT location_id, name, latitude, longitude, geofence_radius_m
                FROM locations
                WHERE location_id=%s
                """,
                (int(location_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            cur.execute(
                "SELECT weekday, is_open, open_time, close_time FROM location_hours WHERE location_id=%s",
                (int(location_id),),
            )
            hours = {int(h["weekday"]): _to_hours(h) for h in fetchall(cur)}
            return _to_location(r, hours)
