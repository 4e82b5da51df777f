import pytest

from shiftclock.core.exceptions import ValidationError
from shiftclock.payroll.rounding import apply_rounding, format_hours_minutes


@pytest.mark.parametrize(
    "raw, expected",
    [
        (52, 45),
        (54, 45),
        (55, 60),
        (56, 60),
        (60, 60),
        (0, 0),
        (7, 0),
        (127, 120),
        (131, 135),
    ],
)
def test_rounding_with_15_minute_interval_and_5_minute_buffer(raw, expected):
    assert apply_rounding(raw, 15, 5) == expected


def test_zero_interval_keeps_exact_minutes():
    assert apply_rounding(52, 0, 0) == 52


def test_missing_or_negative_minutes_count_as_zero():
    assert apply_rounding(None, 15, 5) == 0
    assert apply_rounding(-10, 15, 5) == 0


def test_buffer_must_be_smaller_than_interval():
    with pytest.raises(ValidationError):
        apply_rounding(52, 15, 15)


def test_negative_settings_are_rejected():
    with pytest.raises(ValidationError):
        apply_rounding(52, -15, 5)
    with pytest.raises(ValidationError):
        apply_rounding(52, 15, -1)


@pytest.mark.parametrize("minutes, text", [(45, "45m"), (120, "2h"), (135, "2h 15m"), (-5, "0m")])
def test_format_hours_minutes(minutes, text):
    assert format_hours_minutes(minutes) == text
