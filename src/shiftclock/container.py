from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.factory import AutoCloseStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.notifier import AutoCloseNotifier, GeofenceVerifier
from .attendance.service import AttendanceService
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .locations.mysql_location_repository import MySQLLocationRepository
from .payroll.service import PayrollReportService
from .schedules.service import ScheduleService
from .settings import OrgSettings
from .shifts.mysql_shift_repository import MySQLShiftInstanceRepository, MySQLShiftTemplateRepository


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection
    settings: OrgSettings

    employees_repo: MySQLEmployeeRepository
    locations_repo: MySQLLocationRepository
    templates_repo: MySQLShiftTemplateRepository
    instances_repo: MySQLShiftInstanceRepository
    attendance_repo: MySQLAttendanceRepository

    schedule_service: ScheduleService
    attendance_service: AttendanceService
    payroll_report_service: PayrollReportService


def build_container(
    *,
    db_config: dict,
    settings: OrgSettings,
    notifier: Optional[AutoCloseNotifier] = None,
    geofence: Optional[GeofenceVerifier] = None,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    employees_repo = MySQLEmployeeRepository(conn)
    locations_repo = MySQLLocationRepository(conn)
    templates_repo = MySQLShiftTemplateRepository(conn)
    instances_repo = MySQLShiftInstanceRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)

    schedule_service = ScheduleService(templates_repo, instances_repo, employees_repo, locations_repo, settings)
    attendance_service = AttendanceService(
        attendance_repo,
        schedule_service,
        employees_repo,
        locations_repo,
        settings,
        notifier=notifier,
        geofence=geofence,
        factory=AutoCloseStrategyFactory(),
    )
    payroll_report_service = PayrollReportService(attendance_repo, employees_repo, settings)

    return Container(
        conn=conn,
        settings=settings,
        employees_repo=employees_repo,
        locations_repo=locations_repo,
        templates_repo=templates_repo,
        instances_repo=instances_repo,
        attendance_repo=attendance_repo,
        schedule_service=schedule_service,
        attendance_service=attendance_service,
        payroll_report_service=payroll_report_service,
    )
