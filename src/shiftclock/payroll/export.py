from __future__ import annotations

import io

import pandas as pd

from .model import PayrollReport
from .rounding import format_hours_minutes

SUMMARY_HEADER = [
    "employee_id",
    "employee_name",
    "sessions",
    "raw_minutes",
    "rounded_minutes",
    "hours",
    "regular_hours",
    "overtime_hours",
    "hourly_rate",
    "total_pay",
]

LINES_HEADER = [
    "session_id",
    "employee_id",
    "location_id",
    "work_date",
    "clock_in",
    "clock_out",
    "raw_minutes",
    "rounded_minutes",
]


def summary_frame(report: PayrollReport) -> pd.DataFrame:
    """One row per employee plus a trailing TOTAL row."""
    rows = [
        [
            e.employee_id,
            e.employee_name,
            e.sessions_count,
            e.raw_minutes,
            e.rounded_minutes,
            format_hours_minutes(e.rounded_minutes),
            f"{e.regular_hours:.2f}",
            f"{e.overtime_hours:.2f}",
            f"{e.hourly_rate:.2f}",
            f"{e.total_pay:.2f}",
        ]
        for e in report.employees
    ]
    rows.append(["", "TOTAL", len(report.lines), "", report.total_rounded_minutes, "", "", "", "", f"{report.total_pay:.2f}"])
    return pd.DataFrame(rows, columns=SUMMARY_HEADER)


def lines_frame(report: PayrollReport) -> pd.DataFrame:
    rows = [
        [
            line.session_id,
            line.employee_id,
            line.location_id,
            line.work_date.isoformat(),
            line.clock_in_time.isoformat(),
            line.clock_out_time.isoformat() if line.clock_out_time else "",
            line.raw_minutes,
            line.rounded_minutes,
        ]
        for line in report.lines
    ]
    return pd.DataFrame(rows, columns=LINES_HEADER)


def summary_csv(report: PayrollReport) -> str:
    return summary_frame(report).to_csv(index=False)


def lines_csv(report: PayrollReport) -> str:
    return lines_frame(report).to_csv(index=False)


def report_xlsx(report: PayrollReport) -> bytes:
    """Workbook with a summary sheet and a per-session sheet, built in memory."""
    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        summary_frame(report).to_excel(writer, index=False, sheet_name="Summary")
        lines_frame(report).to_excel(writer, index=False, sheet_name="Sessions")
    return output.getvalue()
