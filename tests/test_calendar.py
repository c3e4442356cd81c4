from datetime import date, timedelta

import pytest

from app.core.calendar import ProgramCalendar, is_class_day
from app.core.errors import InvalidDateError


def test_dates_before_program_start_are_never_class_days(calendar):
    assert calendar.is_class_day("2025-03-14") is False
    # Wednesday, otherwise a class weekday
    assert calendar.is_class_day("2025-03-12") is False
    assert calendar.is_class_day("2024-11-16") is False


def test_program_start_is_a_class_day(calendar):
    assert calendar.is_class_day("2025-03-15") is True


@pytest.mark.parametrize("day", ["2025-03-20", "2025-03-21", "2025-04-03", "2025-04-04", "2026-02-12", "2026-02-13"])
def test_thursdays_and_fridays_are_not_class_days(calendar, day):
    assert calendar.is_class_day(day) is False


def test_non_class_weekdays_hold_across_years(calendar):
    day = date(2025, 3, 20)
    for _ in range(120):
        assert calendar.is_class_day(day) is False
        assert calendar.is_class_day(day + timedelta(days=1)) is False
        day += timedelta(days=7)


def test_holiday_overrides_class_weekday(calendar):
    # Easter Sunday
    assert calendar.is_class_day("2025-04-20") is False
    assert calendar.is_class_day("2025-04-19") is True
    assert calendar.is_class_day("2025-04-21") is True


def test_cancelled_class_day(calendar):
    cancelled = calendar.with_cancelled_days(["2025-03-17", "2025-03-20", "2025-03-10"])

    assert cancelled.is_class_day("2025-03-17") is False
    assert cancelled.is_cancelled_class_day("2025-03-17") is True
    # only dates that would otherwise hold class are reported as cancelled
    assert cancelled.is_cancelled_class_day("2025-03-20") is False
    assert cancelled.is_cancelled_class_day("2025-03-10") is False
    assert calendar.is_class_day("2025-03-17") is True


def test_cancelled_day_that_is_also_a_holiday_is_not_cancelled():
    calendar = ProgramCalendar("2025-03-15", [4, 5], holidays=["2025-04-20"], cancelled_days=["2025-04-20"])
    assert calendar.is_cancelled_class_day("2025-04-20") is False


def test_day_info(calendar):
    info = calendar.with_cancelled_days(["2025-03-17"]).day_info("2025-03-17")
    assert info.date == date(2025, 3, 17)
    assert info.is_class_day is False
    assert info.is_cancelled is True


def test_class_days_over_a_week(calendar):
    assert calendar.class_days("2025-03-15", "2025-03-21") == [
        date(2025, 3, 15), date(2025, 3, 16), date(2025, 3, 17), date(2025, 3, 18), date(2025, 3, 19),
    ]


def test_malformed_dates_fail_fast(calendar):
    with pytest.raises(InvalidDateError):
        calendar.is_class_day("2025-13-01")
    with pytest.raises(InvalidDateError):
        calendar.is_cancelled_class_day("not a date")


def test_invalid_weekday_configuration():
    with pytest.raises(ValueError):
        ProgramCalendar("2025-03-15", non_class_weekdays=[7])


def test_module_helper_uses_configured_calendar():
    assert is_class_day("2025-03-14") is False
    assert is_class_day("2025-03-15") is True
    assert is_class_day("2025-03-17", ProgramCalendar("2025-03-18")) is False
