# app/core/calendar.py
"""
Календарь программы: какие даты считаются учебными днями.

Учебный день определяется только по самой дате:
  - дата не раньше начала программы;
  - день недели не входит в список дней без занятий;
  - дата не является праздником и не отменена.

Отменённый день (cancelled) - это день, который был бы учебным, но занятие
отменили. Посещаемость за него не требуется, но история за этот день
остаётся доступной для просмотра.
"""
import logging
from datetime import date
from typing import Iterable, Iterator, List, Optional

from pydantic import BaseModel

from app.core.config import settings
from app.core.dates import DateLike, iter_days, parse_calendar_date, weekday_number

logger = logging.getLogger(__name__)


class CalendarDay(BaseModel):
    date: date
    is_class_day: bool
    is_cancelled: bool


class ProgramCalendar:
    def __init__(
        self,
        start_date: DateLike,
        non_class_weekdays: Iterable[int] = (),
        holidays: Iterable[DateLike] = (),
        cancelled_days: Iterable[DateLike] = (),
    ):
        self.start_date = parse_calendar_date(start_date)
        self.non_class_weekdays = frozenset(non_class_weekdays)
        for weekday in self.non_class_weekdays:
            if not 0 <= weekday <= 6:
                raise ValueError(f"Weekday must be in 0..6 (0 = Sunday), got {weekday}")
        self.holidays = frozenset(parse_calendar_date(d) for d in holidays)
        self.cancelled_days = frozenset(parse_calendar_date(d) for d in cancelled_days)

    @classmethod
    def from_settings(cls, settings) -> "ProgramCalendar":
        return cls(
            start_date=settings.PROGRAM_START_DATE,
            non_class_weekdays=settings.NON_CLASS_WEEKDAYS,
            holidays=settings.HOLIDAYS,
            cancelled_days=settings.CANCELLED_CLASS_DAYS,
        )

    def with_cancelled_days(self, days: Iterable[DateLike]) -> "ProgramCalendar":
        return ProgramCalendar(
            start_date=self.start_date,
            non_class_weekdays=self.non_class_weekdays,
            holidays=self.holidays,
            cancelled_days=set(self.cancelled_days) | {parse_calendar_date(d) for d in days},
        )

    def _is_scheduled(self, day: date) -> bool:
        # Расписание без учёта отмен
        if day < self.start_date:
            return False
        if weekday_number(day) in self.non_class_weekdays:
            return False
        return day not in self.holidays

    def is_class_day(self, day: DateLike) -> bool:
        parsed = parse_calendar_date(day)
        return self._is_scheduled(parsed) and parsed not in self.cancelled_days

    def is_cancelled_class_day(self, day: DateLike) -> bool:
        parsed = parse_calendar_date(day)
        return parsed in self.cancelled_days and self._is_scheduled(parsed)

    def day_info(self, day: DateLike) -> CalendarDay:
        parsed = parse_calendar_date(day)
        return CalendarDay(
            date=parsed,
            is_class_day=self.is_class_day(parsed),
            is_cancelled=self.is_cancelled_class_day(parsed),
        )

    def class_days(self, start: DateLike, end: DateLike) -> List[date]:
        return list(self.iter_class_days(start, end))

    def iter_class_days(self, start: DateLike, end: DateLike) -> Iterator[date]:
        for day in iter_days(parse_calendar_date(start), parse_calendar_date(end)):
            if self.is_class_day(day):
                yield day
            else:
                logger.debug("Skipping non-class day %s", day.isoformat())

    def __repr__(self):
        return (
            f"ProgramCalendar(start_date={self.start_date.isoformat()}, "
            f"non_class_weekdays={sorted(self.non_class_weekdays)}, "
            f"holidays={len(self.holidays)}, cancelled_days={len(self.cancelled_days)})"
        )


def default_calendar() -> ProgramCalendar:
    return ProgramCalendar.from_settings(settings)


def is_class_day(day: DateLike, calendar: Optional[ProgramCalendar] = None) -> bool:
    return (calendar or default_calendar()).is_class_day(day)


def is_cancelled_class_day(day: DateLike, calendar: Optional[ProgramCalendar] = None) -> bool:
    return (calendar or default_calendar()).is_cancelled_class_day(day)
