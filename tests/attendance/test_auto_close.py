from datetime import date, datetime, time, timezone

from shiftclock.attendance.automation import decide_auto_close, governing_shift
from shiftclock.attendance.model import AttendanceSession
from shiftclock.common.timezones import combine_local
from shiftclock.core.enums import ClosureReason
from shiftclock.locations.model import DayHours, LocationProfile
from shiftclock.settings import OrgSettings
from shiftclock.shifts.model import EffectiveShift, PersistedRef, VirtualRef

SETTINGS = OrgSettings(timezone="America/New_York")
ZONE = SETTINGS.zone
MONDAY = date(2024, 1, 8)

LOCATION = LocationProfile(
    location_id=3,
    name="Main",
    operating_hours={0: DayHours(is_open=True, open_time=time(8, 0), close_time=time(18, 0))},
)


def _local(hour: int, minute: int = 0, day: date = MONDAY) -> datetime:
    return combine_local(ZONE, day, time(hour, minute))


def _session(clock_in: datetime, **overrides) -> AttendanceSession:
    fields = dict(session_id=1, employee_id=7, location_id=3, clock_in_time=clock_in)
    fields.update(overrides)
    return AttendanceSession(**fields)


def _shift(start: datetime, end: datetime, *, location_id: int = 3, key: int = 1) -> EffectiveShift:
    return EffectiveShift(
        ref=PersistedRef(instance_id=key),
        employee_id=7,
        employee_name="Ana",
        location_id=location_id,
        location_name="Main",
        work_date=MONDAY,
        start_time=start,
        end_time=end,
    )


SHIFT = _shift(_local(9), _local(17))


def test_closes_at_shift_end_once_it_has_passed():
    decision = decide_auto_close(_session(_local(8, 55)), [SHIFT], LOCATION, _local(17, 5), SETTINGS)

    assert decision is not None
    assert decision.clock_out_time == _local(17)
    assert decision.reason == ClosureReason.AUTO_SHIFT_END
    assert decision.shift_id == "persisted:1"


def test_nothing_to_do_before_shift_end():
    assert decide_auto_close(_session(_local(8, 55)), [SHIFT], LOCATION, _local(16, 59), SETTINGS) is None


def test_exactly_at_shift_end_is_not_yet_due():
    assert decide_auto_close(_session(_local(8, 55)), [SHIFT], LOCATION, _local(17), SETTINGS) is None


def test_without_shift_closes_at_location_close():
    decision = decide_auto_close(_session(_local(9)), [], LOCATION, _local(18, 10), SETTINGS)

    assert decision.clock_out_time == _local(18)
    assert decision.reason == ClosureReason.AUTO_LOCATION_CLOSE
    assert decision.shift_id is None


def test_shift_at_another_location_does_not_govern():
    elsewhere = _shift(_local(9), _local(12), location_id=4)

    decision = decide_auto_close(_session(_local(9)), [elsewhere], LOCATION, _local(13), SETTINGS)

    assert decision is None


def test_no_shift_and_closed_location_leaves_session_open():
    closed = LocationProfile(location_id=3, name="Main", operating_hours={})

    assert decide_auto_close(_session(_local(9)), [], closed, _local(23), SETTINGS) is None
    assert decide_auto_close(_session(_local(9)), [], None, _local(23), SETTINGS) is None


def test_clock_out_is_never_before_clock_in():
    session = _session(_local(17, 30))

    decision = decide_auto_close(session, [SHIFT], LOCATION, _local(17, 40), SETTINGS)

    assert decision.clock_out_time == session.clock_in_time


def test_closed_session_is_ignored():
    session = _session(_local(8, 55), clock_out_time=_local(16), closure_reason=ClosureReason.MANUAL)

    assert decide_auto_close(session, [SHIFT], LOCATION, _local(17, 5), SETTINGS) is None


def test_governing_shift_is_latest_ending_on_session_date():
    later = EffectiveShift(
        ref=VirtualRef(template_id=2, series_id="rg-2", work_date=MONDAY),
        employee_id=7,
        employee_name="Ana",
        location_id=3,
        location_name="Main",
        work_date=MONDAY,
        start_time=_local(12),
        end_time=_local(20),
        series_id="rg-2",
    )
    next_day = _shift(_local(9, day=date(2024, 1, 9)), _local(23, day=date(2024, 1, 9)), key=9)
    next_day = EffectiveShift(**{**next_day.__dict__, "work_date": date(2024, 1, 9)})

    assert governing_shift(_session(_local(8, 55)), [SHIFT, later, next_day], SETTINGS) == later


def test_overnight_utc_does_not_change_session_date():
    # 19:30 local is already the next UTC day
    session = _session(_local(19, 30))
    evening = _shift(_local(19), _local(22, 30))

    decision = decide_auto_close(session, [evening], LOCATION, _local(22, 45), SETTINGS)

    assert decision.clock_out_time == _local(22, 30)
