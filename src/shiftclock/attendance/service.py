from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Optional

from ..common.datetime_utils import now_utc
from ..common.timezones import day_window, local_date
from ..common.validators import require_aware, require_positive_id
from ..core.enums import ClockInFailure, ClosureReason
from ..core.exceptions import ClockInRejected, NotFoundError, PersistenceError, ValidationError
from ..employees.repository import EmployeeRepository
from ..locations.hours import is_within_operating_hours
from ..locations.model import LocationProfile
from ..locations.repository import LocationRepository
from ..payroll.calculator.base import PayrollCalculator
from ..payroll.calculator.factory import PayrollCalculatorFactory
from ..schedules.service import ScheduleService
from ..settings import OrgSettings
from .automation import decide_auto_close
from .factory import AutoCloseStrategyFactory
from .model import AttendanceSession, ClosureDecision, TodaySummary
from .notifier import AllowAllGeofence, AutoCloseNotifier, GeofenceVerifier, LoggingNotifier
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceService:
    def __init__(
        self,
        sessions: AttendanceRepository,
        schedules: ScheduleService,
        employees: EmployeeRepository,
        locations: LocationRepository,
        settings: OrgSettings,
        *,
        notifier: Optional[AutoCloseNotifier] = None,
        geofence: Optional[GeofenceVerifier] = None,
        factory: Optional[AutoCloseStrategyFactory] = None,
        calculator: Optional[PayrollCalculator] = None,
    ):
        self._sessions = sessions
        self._schedules = schedules
        self._employees = employees
        self._locations = locations
        self._settings = settings
        self._notifier = notifier or LoggingNotifier()
        self._geofence = geofence or AllowAllGeofence()
        self._factory = factory or AutoCloseStrategyFactory()
        self._calculator = calculator or PayrollCalculatorFactory().for_settings(settings.payroll)

    def _require_location(self, location_id) -> LocationProfile:
        location_id = require_positive_id(location_id, "Location")
        location = self._locations.get_by_id(location_id)
        if location is None:
            raise NotFoundError("Location not found")
        return location

    # --- manual punches ---

    def clock_in(
        self,
        *,
        employee_id: int,
        location_id: int,
        coordinates: Optional[tuple[float, float]] = None,
        now: Optional[datetime] = None,
    ) -> int:
        now = now or now_utc()
        require_aware(now, "now")
        employee_id = require_positive_id(employee_id, "Employee")
        if not self._employees.get_by_id(employee_id):
            raise NotFoundError("Employee not found")
        location = self._require_location(location_id)

        if not self._geofence.verify(location, coordinates):
            raise ClockInRejected(ClockInFailure.OUTSIDE_GEOFENCE, "You are not at the workplace location.")

        if self._sessions.get_open_for_employee(employee_id):
            raise ClockInRejected(ClockInFailure.ALREADY_CLOCKED_IN, "You are already clocked in.")

        zone = self._settings.zone
        hours = is_within_operating_hours(location, now, zone)
        if not hours.is_valid:
            raise ClockInRejected(ClockInFailure.OUTSIDE_OPERATING_HOURS, hours.reason or "The workplace is closed.")

        if self._settings.enforce_shift_hours:
            self._check_shift_hours(employee_id, location.location_id, now)

        session_id = self._sessions.create_clock_in(
            employee_id=employee_id,
            location_id=location.location_id,
            clock_in_time=now,
        )
        logger.info("Employee %s clocked in at location %s (session=%s)", employee_id, location.location_id, session_id)
        return session_id

    def _check_shift_hours(self, employee_id: int, location_id: int, now: datetime) -> None:
        day = local_date(self._settings.zone, now)
        grace = timedelta(minutes=self._settings.clock_in_grace_minutes)
        shifts = [
            s
            for s in self._schedules.effective_shifts_on(day=day, employee_id=employee_id)
            if s.location_id == location_id
        ]
        if not shifts:
            raise ClockInRejected(ClockInFailure.OUTSIDE_SHIFT_HOURS, "You have no shift scheduled here today.")
        if not any(s.start_time - grace <= now <= s.end_time for s in shifts):
            raise ClockInRejected(ClockInFailure.OUTSIDE_SHIFT_HOURS, "You are outside your scheduled shift hours.")

    def clock_out(self, *, employee_id: int, now: Optional[datetime] = None) -> AttendanceSession:
        now = now or now_utc()
        require_aware(now, "now")
        employee_id = require_positive_id(employee_id, "Employee")

        session = self._sessions.get_open_for_employee(employee_id)
        if session is None:
            raise ValidationError("No active clock-in found")
        if now < session.clock_in_time:
            raise ValidationError("Clock-out cannot be before clock-in")

        if not self._sessions.close_if_open(session_id=session.session_id, clock_out_time=now, reason=ClosureReason.MANUAL):
            raise ValidationError("Session was already closed")
        logger.info("Employee %s clocked out (session=%s)", employee_id, session.session_id)
        closed = self._sessions.get_by_id(session.session_id)
        if closed is None:
            raise NotFoundError("Session not found")
        return closed

    def current_session(self, employee_id: int) -> Optional[AttendanceSession]:
        return self._sessions.get_open_for_employee(require_positive_id(employee_id, "Employee"))

    def today_summary(self, employee_id: int, now: Optional[datetime] = None) -> TodaySummary:
        """Worked time of sessions started today (org time), counting an open one up to ``now``."""
        now = now or now_utc()
        require_aware(now, "now")
        employee_id = require_positive_id(employee_id, "Employee")

        start, end = day_window(self._settings.zone, now)
        sessions = self._sessions.list_in_range(start=start, end=end, employee_id=employee_id)
        return TodaySummary(
            employee_id=employee_id,
            day=local_date(self._settings.zone, now),
            sessions_count=len(sessions),
            raw_minutes=sum(self._calculator.raw_minutes(s, now) for s in sessions),
            rounded_minutes=sum(self._calculator.worked_minutes(s, now) for s in sessions),
            open_session=next((s for s in sessions if s.is_open), None),
        )

    # --- automation ---

    def run_auto_close(self, now: Optional[datetime] = None) -> list[ClosureDecision]:
        """One poll of the auto-close job; returns the closures it committed.

        A session that fails to persist is left open and retried on the next poll.
        """
        now = now or now_utc()
        require_aware(now, "now")
        open_sessions = list(self._sessions.list_open())
        if not open_sessions:
            return []

        zone = self._settings.zone
        days = [local_date(zone, s.clock_in_time) for s in open_sessions]
        shifts = self._schedules.effective_shifts(start=min(days), end=max(days))
        locations: dict[int, Optional[LocationProfile]] = {}

        applied: list[ClosureDecision] = []
        for session in open_sessions:
            if session.location_id not in locations:
                locations[session.location_id] = self._locations.get_by_id(session.location_id)
            decision = decide_auto_close(
                session,
                shifts,
                locations[session.location_id],
                now,
                self._settings,
                factory=self._factory,
            )
            if decision is None:
                continue
            try:
                if self._close(session, decision):
                    applied.append(decision)
            except PersistenceError:
                logger.warning("Auto-close of session %s failed; will retry", session.session_id, exc_info=True)

        if applied:
            logger.info("Auto-close run closed %d of %d open sessions", len(applied), len(open_sessions))
        return applied

    def _close(self, session: AttendanceSession, decision: ClosureDecision) -> bool:
        current = self._sessions.get_by_id(session.session_id)
        if current is None or not current.is_open:
            logger.debug("Session %s already closed; skipping", session.session_id)
            return False
        closed = self._sessions.close_if_open(
            session_id=session.session_id,
            clock_out_time=decision.clock_out_time,
            reason=decision.reason,
        )
        if not closed:
            logger.debug("Session %s closed concurrently; skipping", session.session_id)
            return False

        try:
            self._notifier.session_auto_closed(current, decision)
        except Exception:
            logger.exception("Auto-close notification for session %s failed", session.session_id)
        return True
