from __future__ import annotations

import time

import click
from flask import Flask, jsonify

from ..common.datetime_utils import now_utc
from ..common.http import json_body, optional_int
from ..common.timezones import local_time
from ..container import Container
from ..core.exceptions import ValidationError
from ..payroll.rounding import format_hours_minutes
from .model import AttendanceSession, ClosureDecision


def session_to_dict(session: AttendanceSession) -> dict:
    return {
        "session_id": session.session_id,
        "employee_id": session.employee_id,
        "location_id": session.location_id,
        "clock_in_time": session.clock_in_time.isoformat(),
        "clock_out_time": session.clock_out_time.isoformat() if session.clock_out_time else None,
        "closure_reason": session.closure_reason.value if session.closure_reason else None,
        "is_open": session.is_open,
    }


def decision_to_dict(decision: ClosureDecision) -> dict:
    return {
        "session_id": decision.session_id,
        "clock_out_time": decision.clock_out_time.isoformat(),
        "reason": decision.reason.value,
        "shift_id": decision.shift_id,
    }


def _coordinates(payload: dict):
    lat, lng = payload.get("latitude"), payload.get("longitude")
    if lat is None or lng is None:
        return None
    try:
        return float(lat), float(lng)
    except (TypeError, ValueError):
        raise ValidationError("Invalid coordinates")


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    @app.route("/api/clock/in", methods=["POST"], endpoint="api_clock_in")
    def clock_in():
        payload = json_body()
        session_id = service.clock_in(
            employee_id=optional_int(payload.get("employee_id")),
            location_id=optional_int(payload.get("location_id")),
            coordinates=_coordinates(payload),
        )
        return jsonify({"success": True, "message": "Clocked in", "session_id": session_id}), 201

    @app.route("/api/clock/out", methods=["POST"], endpoint="api_clock_out")
    def clock_out():
        payload = json_body()
        session = service.clock_out(employee_id=optional_int(payload.get("employee_id")))
        return jsonify({"success": True, "message": "Clocked out", "session": session_to_dict(session)})

    @app.route("/api/clock/<int:employee_id>/status", methods=["GET"], endpoint="api_clock_status")
    def clock_status(employee_id: int):
        session = service.current_session(employee_id)
        hhmm, weekday = local_time(container.settings.zone, now_utc())
        return jsonify(
            {
                "success": True,
                "clocked_in": session is not None,
                "session": session_to_dict(session) if session else None,
                "local_time": hhmm,
                "weekday": weekday,
            }
        )

    @app.route("/api/attendance/<int:employee_id>/today", methods=["GET"], endpoint="api_attendance_today")
    def attendance_today(employee_id: int):
        summary = service.today_summary(employee_id)
        return jsonify(
            {
                "success": True,
                "employee_id": summary.employee_id,
                "day": summary.day.isoformat(),
                "sessions": summary.sessions_count,
                "raw_minutes": summary.raw_minutes,
                "rounded_minutes": summary.rounded_minutes,
                "worked": format_hours_minutes(summary.rounded_minutes),
                "open_session": session_to_dict(summary.open_session) if summary.open_session else None,
            }
        )

    @app.route("/api/attendance/auto-close", methods=["POST"], endpoint="api_attendance_auto_close")
    def attendance_auto_close():
        closed = service.run_auto_close()
        return jsonify({"success": True, "closed": [decision_to_dict(d) for d in closed]})

    @app.cli.command("auto-close")
    @click.option("--loop", is_flag=True, help="Keep polling instead of running once.")
    @click.option("--interval", default=60, show_default=True, help="Seconds between polls with --loop.")
    def auto_close_command(loop: bool, interval: int):
        """Force-close sessions whose shift (or site) has ended."""
        while True:
            closed = service.run_auto_close()
            click.echo(f"auto-close: closed {len(closed)} session(s)")
            if not loop:
                break
            time.sleep(max(int(interval), 1))
