from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import format_hhmm, now_utc, parse_hhmm, parse_iso_date
from ..common.http import int_list, json_body, optional_int, parse_enum
from ..common.timezones import local_date
from ..container import Container
from ..core.enums import EditScope, RepeatMode
from ..core.exceptions import ValidationError
from ..shifts.model import EffectiveShift, ShiftTemplate
from .scope import ShiftEdit
from .service import BatchResult


def shift_to_dict(shift: EffectiveShift) -> dict:
    return {
        "id": shift.shift_id,
        "employee_id": shift.employee_id,
        "employee_name": shift.employee_name,
        "location_id": shift.location_id,
        "location_name": shift.location_name,
        "work_date": shift.work_date.isoformat(),
        "start_time": shift.start_time.isoformat(),
        "end_time": shift.end_time.isoformat(),
        "series_id": shift.series_id,
        "is_virtual": shift.is_virtual,
    }


def template_to_dict(template: ShiftTemplate) -> dict:
    return {
        "template_id": template.template_id,
        "series_id": template.series_id,
        "employee_id": template.employee_id,
        "location_id": template.location_id,
        "weekday": template.weekday,
        "start_time": format_hhmm(template.start_time),
        "end_time": format_hhmm(template.end_time),
        "effective_from": template.effective_from.isoformat(),
        "effective_until": template.effective_until.isoformat() if template.effective_until else None,
    }


def batch_to_dict(result: BatchResult) -> dict:
    return {
        "success": True,
        "created_ids": result.created_ids,
        "updated": result.updated,
        "deleted": result.deleted,
        "terminated": result.terminated,
    }


def _required(payload: dict, key: str):
    value = payload.get(key)
    if value in (None, ""):
        raise ValidationError(f"{key} is required")
    return value


def register(app: Flask, container: Container) -> None:
    service = container.schedule_service
    zone = container.settings.zone

    @app.route("/api/schedule", methods=["GET"], endpoint="api_schedule_list")
    def schedule_list():
        today = local_date(zone, now_utc())
        default_start, default_end = service.default_window(today)
        start = parse_iso_date(request.args["start"]) if request.args.get("start") else default_start
        end = parse_iso_date(request.args["end"]) if request.args.get("end") else default_end
        shifts = service.effective_shifts(start=start, end=end, employee_id=optional_int(request.args.get("employee_id")))
        return jsonify(
            {
                "success": True,
                "start": start.isoformat(),
                "end": end.isoformat(),
                "timezone": container.settings.timezone,
                "shifts": [shift_to_dict(s) for s in shifts],
            }
        )

    @app.route("/api/schedule/shifts/<path:shift_id>", methods=["GET"], endpoint="api_schedule_get")
    def schedule_get(shift_id: str):
        return jsonify({"success": True, "shift": shift_to_dict(service.find_shift(shift_id))})

    @app.route("/api/schedule/shifts", methods=["POST"], endpoint="api_schedule_create")
    def schedule_create():
        payload = json_body()
        until = payload.get("repeat_until")
        result = service.schedule_shift(
            employee_id=optional_int(_required(payload, "employee_id")),
            location_id=optional_int(_required(payload, "location_id")),
            work_date=parse_iso_date(_required(payload, "work_date")),
            start_time=parse_hhmm(_required(payload, "start_time")),
            end_time=parse_hhmm(_required(payload, "end_time")),
            repeat=parse_enum(RepeatMode, payload.get("repeat"), RepeatMode.NONE),
            repeat_until=parse_iso_date(until) if until else None,
            weekdays=int_list(payload.get("weekdays"), "weekdays"),
        )
        return jsonify(batch_to_dict(result)), 201

    @app.route("/api/schedule/shifts/<path:shift_id>", methods=["PUT", "PATCH"], endpoint="api_schedule_edit")
    def schedule_edit(shift_id: str):
        payload = json_body()
        edit = ShiftEdit(
            start_time=parse_hhmm(_required(payload, "start_time")),
            end_time=parse_hhmm(_required(payload, "end_time")),
            location_id=optional_int(payload.get("location_id")),
        )
        result = service.edit_shift(
            shift_key=shift_id,
            scope=parse_enum(EditScope, payload.get("scope"), EditScope.THIS),
            edit=edit,
        )
        return jsonify(batch_to_dict(result))

    @app.route("/api/schedule/shifts/<path:shift_id>", methods=["DELETE"], endpoint="api_schedule_delete")
    def schedule_delete(shift_id: str):
        scope = parse_enum(EditScope, request.args.get("scope") or json_body().get("scope"), EditScope.THIS)
        return jsonify(batch_to_dict(service.delete_shift(shift_key=shift_id, scope=scope)))

    @app.route("/api/schedule/templates", methods=["POST"], endpoint="api_schedule_template_create")
    def template_create():
        payload = json_body()
        until = payload.get("effective_until")
        template = service.create_template(
            employee_id=optional_int(_required(payload, "employee_id")),
            location_id=optional_int(_required(payload, "location_id")),
            weekday=optional_int(_required(payload, "weekday")),
            start_time=parse_hhmm(_required(payload, "start_time")),
            end_time=parse_hhmm(_required(payload, "end_time")),
            effective_from=parse_iso_date(_required(payload, "effective_from")),
            effective_until=parse_iso_date(until) if until else None,
        )
        return jsonify({"success": True, "template": template_to_dict(template)}), 201

    @app.route(
        "/api/schedule/templates/<series_id>/terminate",
        methods=["POST"],
        endpoint="api_schedule_template_terminate",
    )
    def template_terminate(series_id: str):
        payload = json_body()
        result = service.terminate_template(series_id=series_id, last_day=parse_iso_date(_required(payload, "last_day")))
        return jsonify(batch_to_dict(result))

    @app.route("/api/schedule/clean-duplicates", methods=["POST"], endpoint="api_schedule_clean_duplicates")
    def schedule_clean_duplicates():
        payload = json_body()
        result = service.clean_duplicates(
            start=parse_iso_date(_required(payload, "start")),
            end=parse_iso_date(_required(payload, "end")),
        )
        return jsonify(batch_to_dict(result))
