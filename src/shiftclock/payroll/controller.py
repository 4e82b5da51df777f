from __future__ import annotations

import io

from flask import Flask, Response, jsonify, request, send_file

from ..common.datetime_utils import now_utc, parse_iso_date
from ..common.http import optional_int
from ..common.timezones import local_date, week_window
from ..container import Container
from .export import lines_csv, report_xlsx, summary_csv
from .model import PayrollReport
from .rounding import format_hours_minutes


def report_to_dict(report: PayrollReport) -> dict:
    return {
        "period_start": report.period_start.isoformat(),
        "period_end": report.period_end.isoformat(),
        "finalized": report.finalized,
        "rounding_interval": report.settings.rounding_interval,
        "rounding_buffer": report.settings.rounding_buffer,
        "total_pay": report.total_pay,
        "total_rounded_minutes": report.total_rounded_minutes,
        "employees": [
            {
                "employee_id": e.employee_id,
                "employee_name": e.employee_name,
                "sessions": e.sessions_count,
                "raw_minutes": e.raw_minutes,
                "rounded_minutes": e.rounded_minutes,
                "hours": format_hours_minutes(e.rounded_minutes),
                "regular_hours": e.regular_hours,
                "overtime_hours": e.overtime_hours,
                "hourly_rate": e.hourly_rate,
                "total_pay": e.total_pay,
            }
            for e in report.employees
        ],
        "lines": [
            {
                "session_id": line.session_id,
                "employee_id": line.employee_id,
                "location_id": line.location_id,
                "work_date": line.work_date.isoformat(),
                "clock_in_time": line.clock_in_time.isoformat(),
                "clock_out_time": line.clock_out_time.isoformat() if line.clock_out_time else None,
                "raw_minutes": line.raw_minutes,
                "rounded_minutes": line.rounded_minutes,
            }
            for line in report.lines
        ],
    }


def register(app: Flask, container: Container) -> None:
    service = container.payroll_report_service

    @app.route("/api/payroll", methods=["GET"], endpoint="api_payroll")
    def payroll_report():
        settings = container.settings
        if request.args.get("start") and request.args.get("end"):
            start = parse_iso_date(request.args["start"])
            end = parse_iso_date(request.args["end"])
        else:
            # current pay week
            week_start, week_end = week_window(settings.zone, now_utc(), week_start=settings.week_start)
            start, end = local_date(settings.zone, week_start), local_date(settings.zone, week_end)

        report = service.build_payroll_report(
            start=start,
            end=end,
            finalized=request.args.get("live") not in ("1", "true"),
            employee_id=optional_int(request.args.get("employee_id")),
        )

        fmt = (request.args.get("format") or "json").lower()
        if fmt == "csv":
            detail = request.args.get("detail") == "lines"
            body = lines_csv(report) if detail else summary_csv(report)
            filename = f"payroll_{'lines_' if detail else ''}{start.isoformat()}_{end.isoformat()}.csv"
            return Response(
                body,
                mimetype="text/csv",
                headers={"Content-Disposition": f"attachment; filename={filename}"},
            )
        if fmt == "xlsx":
            return send_file(
                io.BytesIO(report_xlsx(report)),
                download_name=f"payroll_{start.isoformat()}_{end.isoformat()}.xlsx",
                as_attachment=True,
                mimetype="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            )
        return jsonify({"success": True, "report": report_to_dict(report)})
