from datetime import date, datetime, time, timezone
from zoneinfo import ZoneInfo

from shiftclock.attendance.factory import AutoCloseStrategyFactory
from shiftclock.attendance.strategies.location_close_strategy import LocationCloseStrategy
from shiftclock.attendance.strategies.shift_end_strategy import ShiftEndStrategy
from shiftclock.core.enums import ClosureReason
from shiftclock.locations.model import DayHours, LocationProfile
from shiftclock.shifts.model import EffectiveShift, PersistedRef

NY = ZoneInfo("America/New_York")

SHIFT = EffectiveShift(
    ref=PersistedRef(instance_id=1),
    employee_id=7,
    employee_name="Ana",
    location_id=3,
    location_name="Main",
    work_date=date(2024, 1, 8),
    start_time=datetime(2024, 1, 8, 14, 0, tzinfo=timezone.utc),
    end_time=datetime(2024, 1, 8, 22, 0, tzinfo=timezone.utc),
)


def test_factory_uses_shift_end_when_a_shift_governs():
    strategy = AutoCloseStrategyFactory().for_session(shift=SHIFT)

    assert isinstance(strategy, ShiftEndStrategy)
    assert strategy.reason == ClosureReason.AUTO_SHIFT_END
    assert strategy.expected_out(day=SHIFT.work_date, shift=SHIFT, location=None, zone=NY) == SHIFT.end_time


def test_factory_falls_back_to_location_close():
    location = LocationProfile(
        location_id=3,
        name="Main",
        operating_hours={0: DayHours(is_open=True, open_time=time(8, 0), close_time=time(18, 0))},
    )

    strategy = AutoCloseStrategyFactory().for_session(shift=None)

    assert isinstance(strategy, LocationCloseStrategy)
    assert strategy.reason == ClosureReason.AUTO_LOCATION_CLOSE
    assert strategy.expected_out(day=date(2024, 1, 8), shift=None, location=location, zone=NY) == datetime(
        2024, 1, 8, 23, 0, tzinfo=timezone.utc
    )


def test_location_close_is_none_on_closed_day():
    location = LocationProfile(location_id=3, name="Main", operating_hours={0: DayHours(is_open=False)})

    strategy = LocationCloseStrategy()

    assert strategy.expected_out(day=date(2024, 1, 8), shift=None, location=location, zone=NY) is None
    assert strategy.expected_out(day=date(2024, 1, 9), shift=None, location=location, zone=NY) is None
