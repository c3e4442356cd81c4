import warnings
from datetime import date

import pytest

from app.core.aggregation import (
    aggregate_by_builder,
    aggregate_by_day,
    attendance_rate,
    find_duplicate_keys,
    summarize_day,
)
from app.core.classification import AttendanceRecord
from app.core.errors import DuplicateRecordError, DuplicateRecordWarning, InvalidDateRangeError


def rec(builder_id, day, status, time_recorded=None, excuse_reason=None):
    return AttendanceRecord.from_row({
        "student_id": builder_id,
        "date": day,
        "status": status,
        "time_recorded": time_recorded,
        "excuse_reason": excuse_reason,
    })


@pytest.fixture
def week_records():
    return [
        rec("b1", "2025-03-15", "present", "2025-03-15T13:30:00Z"),
        rec("b2", "2025-03-15", "present", "2025-03-15T14:20:00Z"),  # late
        rec("b3", "2025-03-15", "absent", excuse_reason="doctor"),
        rec("b1", "2025-03-16", "late"),
        rec("b2", "2025-03-16", "pending"),
        rec("b1", "2025-03-17", "absent"),
        rec("b1", "2025-03-20", "present"),  # Thursday
        rec("b1", "2025-03-14", "present"),  # before program start
    ]


def test_daily_rows_cover_only_class_days(policy, week_records):
    rows = aggregate_by_day(week_records, "2025-03-15", "2025-03-21", policy=policy)

    assert [row.date for row in rows] == [
        date(2025, 3, 15), date(2025, 3, 16), date(2025, 3, 17), date(2025, 3, 18), date(2025, 3, 19),
    ]
    assert [row.name for row in rows] == ["Sat 15", "Sun 16", "Mon 17", "Tue 18", "Wed 19"]


def test_daily_counts(policy, week_records):
    rows = {row.date: row for row in aggregate_by_day(week_records, "2025-03-15", "2025-03-21", policy=policy)}

    sat = rows[date(2025, 3, 15)]
    assert (sat.present, sat.late, sat.absent, sat.excused, sat.total) == (1, 1, 0, 1, 3)
    sun = rows[date(2025, 3, 16)]
    assert (sun.present, sun.late, sun.absent, sun.excused, sun.total) == (0, 1, 1, 0, 2)
    assert rows[date(2025, 3, 17)].absent == 1
    # days without records are still present, zeroed
    assert rows[date(2025, 3, 18)].total == 0


def test_daily_sum_invariant(policy, week_records):
    for row in aggregate_by_day(week_records, "2025-03-15", "2025-03-21", policy=policy):
        expected = sum(1 for r in week_records if r.date == row.date)
        assert row.present + row.late + row.absent + row.excused == row.total == expected


def test_daily_total_is_serialized(policy, week_records):
    row = aggregate_by_day(week_records, "2025-03-15", "2025-03-15", policy=policy)[0]
    assert row.model_dump()["total"] == 3


def test_daily_filters_by_builder_set(policy, week_records):
    rows = aggregate_by_day(week_records, "2025-03-15", "2025-03-15", builder_ids=["b1"], policy=policy)
    assert rows[0].total == 1
    assert rows[0].present == 1


def test_daily_discards_records_outside_range(policy, week_records):
    rows = aggregate_by_day(week_records, "2025-03-16", "2025-03-16", policy=policy)
    assert len(rows) == 1
    assert rows[0].total == 2


def test_daily_range_of_non_class_days_is_empty(policy):
    assert aggregate_by_day([], "2025-03-20", "2025-03-21", policy=policy) == []


def test_daily_rejects_reversed_range(policy):
    with pytest.raises(InvalidDateRangeError):
        aggregate_by_day([], "2025-03-21", "2025-03-15", policy=policy)


def test_duplicates_double_count_with_warning(policy):
    records = [rec("b1", "2025-03-15", "present"), rec("b1", "2025-03-15", "present")]
    assert find_duplicate_keys(records) == {("b1", date(2025, 3, 15))}

    with pytest.warns(DuplicateRecordWarning):
        rows = aggregate_by_day(records, "2025-03-15", "2025-03-15", policy=policy)
    assert rows[0].present == 2
    assert rows[0].total == 2


def test_duplicates_raise_in_strict_mode(policy):
    records = [rec("b1", "2025-03-15", "present"), rec("b1", "2025-03-15", "absent")]
    with pytest.raises(DuplicateRecordError):
        aggregate_by_day(records, "2025-03-15", "2025-03-15", policy=policy, strict=True)


@pytest.mark.parametrize("day, start, end", [
    ("2025-03-20", "2025-03-15", "2025-03-21"),  # четверг
    ("2025-03-24", "2025-03-15", "2025-03-17"),  # вне диапазона
])
def test_strict_mode_ignores_duplicates_that_are_not_counted(policy, day, start, end):
    records = [rec("b1", day, "present"), rec("b1", day, "present")]
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        rows = aggregate_by_day(records, start, end, policy=policy, strict=True)
    assert sum(row.total for row in rows) == 0


def test_no_warning_without_duplicates(policy, week_records):
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        aggregate_by_day(week_records, "2025-03-15", "2025-03-21", policy=policy)


def test_builder_rates(policy, week_records):
    result = aggregate_by_builder(week_records, ["b1", "b2"], policy=policy, today="2025-03-31")

    b1 = result["b1"]
    # 15 present, 16 late, 17 absent; Thursday and pre-start records ignored
    assert (b1.present_or_late_count, b1.total_counted_days, b1.rate) == (2, 3, 67)
    b2 = result["b2"]
    # late + pending (scored as absent)
    assert (b2.present_or_late_count, b2.total_counted_days, b2.rate) == (1, 2, 50)
    # b3 is not tracked
    assert "b3" not in result


def test_builder_without_records_is_reported_with_zero_rate(policy):
    result = aggregate_by_builder([], ["b9"], policy=policy, today="2025-03-31")
    assert result["b9"].total_counted_days == 0
    assert result["b9"].rate == 0


def test_builder_rates_ignore_future_records(policy):
    records = [rec("b1", "2025-03-17", "present"), rec("b1", "2025-03-18", "absent")]
    result = aggregate_by_builder(records, ["b1"], policy=policy, today="2025-03-17")
    assert result["b1"].total_counted_days == 1
    assert result["b1"].rate == 100


def test_builder_rates_with_narrower_range(policy, week_records):
    result = aggregate_by_builder(
        week_records, ["b1"], policy=policy, today="2025-03-31", start="2025-03-16", end="2025-03-16",
    )
    assert result["b1"].total_counted_days == 1
    assert result["b1"].rate == 100


def test_builder_rates_skip_cancelled_days(policy):
    records = [rec("b1", "2025-03-15", "present"), rec("b1", "2025-03-17", "absent")]
    result = aggregate_by_builder(
        records, ["b1"], policy=policy.with_cancelled_days(["2025-03-17"]), today="2025-03-31",
    )
    assert result["b1"].rate == 100


def test_rate_bounds(policy):
    records = [rec("b1", day, "present") for day in ("2025-03-15", "2025-03-16", "2025-03-17")]
    result = aggregate_by_builder(records, ["b1", "b2"], policy=policy, today="2025-03-31")
    for stats in result.values():
        assert 0 <= stats.rate <= 100
    assert result["b1"].rate == 100


@pytest.mark.parametrize("attended,total,expected", [
    (0, 0, 0), (0, 5, 0), (1, 8, 13), (5, 8, 63), (2, 3, 67), (1, 3, 33), (4, 4, 100),
])
def test_attendance_rate_rounds_half_up(attended, total, expected):
    assert attendance_rate(attended, total) == expected


def test_summarize_day(policy):
    records = [
        rec("b1", "2025-03-17", "present"),
        rec("b2", "2025-03-17", "late"),
        rec("b3", "2025-03-17", "pending"),
        rec("b1", "2025-03-16", "present"),
    ]
    summary = summarize_day(records, "2025-03-17", total_builders=4, policy=policy)
    assert (summary.present, summary.late, summary.attendance_rate) == (1, 1, 50)
    assert summarize_day([], "2025-03-17", total_builders=0, policy=policy).attendance_rate == 0
