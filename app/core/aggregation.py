# app/core/aggregation.py
"""
Сводная статистика посещаемости.

Два режима над одним и тем же потоком нормализованных записей:
  - по дням (aggregate_by_day) - строки для графиков, по одной на каждый
    учебный день диапазона, даже если записей за день нет;
  - по ученикам (aggregate_by_builder) - процент посещаемости.

Записи должны быть уникальны по паре (builder_id, date). Дедупликация - задача
вызывающего кода: при повторах дневные счётчики удваиваются (в strict-режиме
вместо этого бросается DuplicateRecordError).
"""
import logging
import warnings
from collections import Counter
from datetime import date
from typing import Dict, Iterable, List, Optional, Set, Tuple

from pydantic import BaseModel, computed_field

from app.core.classification import AttendanceRecord, Classification, normalize
from app.core.dates import DateLike, day_label, parse_calendar_date
from app.core.errors import DuplicateRecordError, DuplicateRecordWarning, InvalidDateRangeError
from app.core.policy import AttendancePolicy, resolve_policy

logger = logging.getLogger(__name__)


class DailyAggregate(BaseModel):
    date: date
    name: str
    present: int = 0
    late: int = 0
    absent: int = 0
    excused: int = 0

    @computed_field
    @property
    def total(self) -> int:
        return self.present + self.late + self.absent + self.excused

    def add(self, classification: Classification):
        field = classification.value
        setattr(self, field, getattr(self, field) + 1)


class BuilderAggregate(BaseModel):
    builder_id: str
    present_or_late_count: int = 0
    total_counted_days: int = 0
    rate: int = 0


class DaySummary(BaseModel):
    date: date
    total_builders: int
    present: int
    late: int
    attendance_rate: int


def attendance_rate(attended: int, total: int) -> int:
    """Процент, округлённый до целого (половина вверх). 0, если total == 0."""
    if total <= 0:
        return 0
    # половина округляется вверх: 2.5 -> 3
    return (200 * attended + total) // (2 * total)


def find_duplicate_keys(records: Iterable[AttendanceRecord]) -> Set[Tuple[str, date]]:
    counts = Counter(record.key for record in records)
    return {key for key, count in counts.items() if count > 1}


def _check_duplicates(records: List[AttendanceRecord], strict: bool):
    duplicates = find_duplicate_keys(records)
    if not duplicates:
        return
    if strict:
        raise DuplicateRecordError(duplicates)
    logger.warning(
        "%d duplicate (builder, date) pairs in aggregation input; daily counts will double",
        len(duplicates),
    )
    warnings.warn(
        f"{len(duplicates)} duplicate attendance records supplied; deduplicate by (builder_id, date)",
        DuplicateRecordWarning,
        stacklevel=3,
    )


def aggregate_by_day(
    records: Iterable[AttendanceRecord],
    start: DateLike,
    end: DateLike,
    builder_ids: Optional[Iterable[str]] = None,
    policy: Optional[AttendancePolicy] = None,
    strict: bool = False,
) -> List[DailyAggregate]:
    policy = resolve_policy(policy)
    start_date = parse_calendar_date(start)
    end_date = parse_calendar_date(end)
    if start_date > end_date:
        raise InvalidDateRangeError(start_date, end_date)

    # Плотный ряд: строка на каждый учебный день, даже без записей
    by_day: Dict[date, DailyAggregate] = {
        day: DailyAggregate(date=day, name=day_label(day))
        for day in policy.calendar.iter_class_days(start_date, end_date)
    }

    allowed = set(builder_ids) if builder_ids is not None else None
    counted = []
    skipped = 0
    for record in records:
        if allowed is not None and record.builder_id not in allowed:
            continue
        if record.date not in by_day:
            # не учебный день или вне диапазона
            skipped += 1
            continue
        counted.append(record)

    # Повторы проверяются только среди записей, которые попадут в счётчики
    _check_duplicates(counted, strict)

    for record in counted:
        by_day[record.date].add(normalize(record, policy.schedule))

    if skipped:
        logger.debug("Skipped %d records outside class days of %s..%s", skipped, start_date, end_date)

    return sorted(by_day.values(), key=lambda row: row.date)


def aggregate_by_builder(
    records: Iterable[AttendanceRecord],
    builder_ids: Iterable[str],
    policy: Optional[AttendancePolicy] = None,
    today: Optional[DateLike] = None,
    start: Optional[DateLike] = None,
    end: Optional[DateLike] = None,
) -> Dict[str, BuilderAggregate]:
    policy = resolve_policy(policy)
    calendar = policy.calendar

    lower = calendar.start_date
    upper = parse_calendar_date(today) if today is not None else policy.today()
    if start is not None:
        lower = max(lower, parse_calendar_date(start))
    if end is not None:
        upper = min(upper, parse_calendar_date(end))

    # Каждый ученик из списка попадает в результат, даже без записей
    result = {builder_id: BuilderAggregate(builder_id=builder_id) for builder_id in builder_ids}

    for record in records:
        stats = result.get(record.builder_id)
        if stats is None:
            continue
        if not lower <= record.date <= upper or not calendar.is_class_day(record.date):
            continue
        stats.total_counted_days += 1
        if normalize(record, policy.schedule) in (Classification.PRESENT, Classification.LATE):
            stats.present_or_late_count += 1

    for stats in result.values():
        stats.rate = attendance_rate(stats.present_or_late_count, stats.total_counted_days)
    return result


def summarize_day(
    records: Iterable[AttendanceRecord],
    day: DateLike,
    total_builders: int,
    policy: Optional[AttendancePolicy] = None,
) -> DaySummary:
    """Сводка на главную страницу: доля пришедших среди всех учеников за день."""
    policy = resolve_policy(policy)
    target = parse_calendar_date(day)
    counts = Counter(
        normalize(record, policy.schedule) for record in records if record.date == target
    )
    present = counts[Classification.PRESENT]
    late = counts[Classification.LATE]
    return DaySummary(
        date=target,
        total_builders=total_builders,
        present=present,
        late=late,
        attendance_rate=min(100, attendance_rate(present + late, total_builders)),
    )
