from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional

from ..common.timezones import local_date
from ..common.validators import require_aware
from ..locations.model import LocationProfile
from ..settings import OrgSettings
from ..shifts.model import EffectiveShift
from .factory import AutoCloseStrategyFactory
from .model import AttendanceSession, ClosureDecision


def governing_shift(
    session: AttendanceSession,
    effective_shifts: Iterable[EffectiveShift],
    settings: OrgSettings,
) -> Optional[EffectiveShift]:
    """The shift that covers the session's employee and site on its start date (latest end wins)."""
    day = local_date(settings.zone, session.clock_in_time)
    candidates = [
        s
        for s in effective_shifts
        if s.employee_id == session.employee_id and s.location_id == session.location_id and s.work_date == day
    ]
    if not candidates:
        return None
    return max(candidates, key=lambda s: (s.end_time, s.shift_id))


def decide_auto_close(
    session: AttendanceSession,
    effective_shifts: Iterable[EffectiveShift],
    location: Optional[LocationProfile],
    now: datetime,
    settings: OrgSettings,
    *,
    factory: Optional[AutoCloseStrategyFactory] = None,
) -> Optional[ClosureDecision]:
    """Whether ``session`` should be force-closed at ``now``, and at which instant.

    The clock-out is the expected end (shift end, else site close), not
    ``now``: the employee is paid through the scheduled window only. Returns
    None while not yet due, or when nothing defines an end for that day.
    """
    require_aware(now, "now")
    if not session.is_open:
        return None

    factory = factory or AutoCloseStrategyFactory()
    zone = settings.zone
    day = local_date(zone, session.clock_in_time)

    shift = governing_shift(session, effective_shifts, settings)
    strategy = factory.for_session(shift=shift)
    expected_out = strategy.expected_out(day=day, shift=shift, location=location, zone=zone)
    if expected_out is None or now <= expected_out:
        return None

    # clocked in after the window closed: close as a zero-length session
    clock_out = max(expected_out, session.clock_in_time)
    return ClosureDecision(
        session_id=session.session_id,
        clock_out_time=clock_out,
        reason=strategy.reason,
        shift_id=shift.shift_id if shift else None,
    )
