import logging
from datetime import date, datetime, time, timezone

from shiftclock.common.timezones import combine_local
from shiftclock.core.enums import ShiftStatus
from shiftclock.settings import OrgSettings
from shiftclock.shifts.model import PersistedRef, ShiftInstance, ShiftTemplate, VirtualRef
from shiftclock.shifts.resolver import find_duplicate_instances, resolve

SETTINGS = OrgSettings(timezone="America/New_York")
ZONE = SETTINGS.zone

TEMPLATE = ShiftTemplate(
    template_id=1,
    series_id="rg-mon",
    employee_id=7,
    location_id=3,
    weekday=0,
    start_time=time(9, 0),
    end_time=time(17, 0),
    effective_from=date(2024, 1, 1),
)


def _instance(instance_id, day, *, series_id="rg-mon", start=time(10, 0), end=time(18, 0), **extra) -> ShiftInstance:
    return ShiftInstance(
        instance_id=instance_id,
        employee_id=extra.pop("employee_id", 7),
        location_id=extra.pop("location_id", 3),
        work_date=day,
        start_time=combine_local(ZONE, day, start),
        end_time=combine_local(ZONE, day, end),
        series_id=series_id,
        **extra,
    )


def _resolve(instances=(), templates=(TEMPLATE,), **kwargs):
    return resolve(templates, instances, date(2024, 1, 1), date(2024, 1, 14), SETTINGS, **kwargs)


def test_virtual_occurrences_when_nothing_is_persisted():
    shifts = _resolve()

    assert [s.work_date for s in shifts] == [date(2024, 1, 1), date(2024, 1, 8)]
    assert all(s.is_virtual for s in shifts)
    assert shifts[0].ref == VirtualRef(template_id=1, series_id="rg-mon", work_date=date(2024, 1, 1))
    assert shifts[0].shift_id == "virtual:rg-mon:2024-01-01"


def test_override_replaces_virtual_occurrence_of_its_date():
    shifts = _resolve([_instance(11, date(2024, 1, 8))])

    assert len(shifts) == 2
    second = shifts[1]
    assert second.ref == PersistedRef(instance_id=11)
    assert second.start_time == datetime(2024, 1, 8, 15, 0, tzinfo=timezone.utc)
    assert not second.is_virtual


def test_cancelled_override_hides_the_occurrence():
    shifts = _resolve([_instance(11, date(2024, 1, 1), status=ShiftStatus.CANCELLED)])

    assert [s.work_date for s in shifts] == [date(2024, 1, 8)]


def test_duplicate_overrides_resolve_to_most_recently_updated(caplog):
    newer = _instance(5, date(2024, 1, 8), start=time(11, 0), updated_at=datetime(2024, 1, 5, tzinfo=timezone.utc))
    older = _instance(7, date(2024, 1, 8), start=time(12, 0), updated_at=datetime(2024, 1, 2, tzinfo=timezone.utc))

    with caplog.at_level(logging.WARNING):
        shifts = _resolve([older, newer])

    jan8 = [s for s in shifts if s.work_date == date(2024, 1, 8)]
    assert [s.shift_id for s in jan8] == ["persisted:5"]
    assert "Duplicate overrides" in caplog.text


def test_duplicate_overrides_with_same_timestamp_use_highest_id():
    stamp = datetime(2024, 1, 5, tzinfo=timezone.utc)
    shifts = _resolve([_instance(5, date(2024, 1, 8), updated_at=stamp), _instance(9, date(2024, 1, 8), updated_at=stamp)])

    assert shifts[1].shift_id == "persisted:9"


def test_find_duplicate_instances_lists_losers():
    stamp = datetime(2024, 1, 5, tzinfo=timezone.utc)
    instances = [
        _instance(5, date(2024, 1, 8), updated_at=stamp),
        _instance(9, date(2024, 1, 8), updated_at=stamp),
        _instance(12, date(2024, 1, 1)),
    ]

    assert find_duplicate_instances(instances) == [5]


def test_one_off_shadows_virtual_occurrence_silently(caplog):
    one_off = _instance(20, date(2024, 1, 1), series_id=None, start=time(6, 0), end=time(12, 0))

    with caplog.at_level(logging.WARNING):
        shifts = _resolve([one_off])

    assert [s.shift_id for s in shifts] == ["persisted:20", "virtual:rg-mon:2024-01-08"]
    assert caplog.text == ""


def test_at_most_one_shift_per_employee_and_date():
    other_template = ShiftTemplate(
        template_id=2,
        series_id="rg-mon-2",
        employee_id=7,
        location_id=4,
        weekday=0,
        start_time=time(18, 0),
        end_time=time(22, 0),
        effective_from=date(2024, 1, 1),
    )

    shifts = _resolve(templates=(TEMPLATE, other_template))

    keys = [(s.employee_id, s.work_date) for s in shifts]
    assert len(keys) == len(set(keys))
    assert {s.series_id for s in shifts} == {"rg-mon"}


def test_repeated_one_off_series_without_template_is_shown():
    shifts = _resolve([_instance(30, date(2024, 1, 3), series_id="rg-repeat")], templates=())

    assert [s.shift_id for s in shifts] == ["persisted:30"]


def test_instances_outside_window_are_ignored():
    shifts = _resolve([_instance(40, date(2024, 1, 15), series_id=None)])

    assert all(s.work_date <= date(2024, 1, 14) for s in shifts)


def test_names_are_attached_with_unknown_fallback():
    shifts = _resolve(employee_names={7: "Ana Ruiz"})

    assert shifts[0].employee_name == "Ana Ruiz"
    assert shifts[0].location_name == "Unknown"


def test_result_is_sorted_by_start_time():
    late_one_off = _instance(50, date(2024, 1, 2), series_id=None, employee_id=8, start=time(8, 0), end=time(9, 0))

    shifts = _resolve([late_one_off])

    starts = [s.start_time for s in shifts]
    assert starts == sorted(starts)


def test_resolve_is_repeatable_on_mixed_input():
    tuesday = ShiftTemplate(
        template_id=2,
        series_id="rg-tue",
        employee_id=8,
        location_id=3,
        weekday=1,
        start_time=time(9, 0),
        end_time=time(17, 0),
        effective_from=date(2024, 1, 1),
    )
    stamp = datetime(2024, 1, 5, tzinfo=timezone.utc)
    instances = [
        _instance(11, date(2024, 1, 8)),
        _instance(12, date(2024, 1, 3), series_id=None, employee_id=9),
        _instance(21, date(2024, 1, 9), series_id="rg-tue", employee_id=8, updated_at=stamp),
        _instance(22, date(2024, 1, 9), series_id="rg-tue", employee_id=8, updated_at=stamp),
    ]
    templates = (TEMPLATE, tuesday)

    first = _resolve(instances, templates)
    second = _resolve(instances, templates)
    shuffled = _resolve(list(reversed(instances)), tuple(reversed(templates)))

    assert first == second == shuffled
    assert [s.shift_id for s in first] == [
        "virtual:rg-mon:2024-01-01",
        "virtual:rg-tue:2024-01-02",
        "persisted:12",
        "persisted:11",
        "persisted:22",
    ]
