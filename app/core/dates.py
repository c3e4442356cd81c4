# app/core/dates.py
"""
Работа с датами для календаря, классификатора опозданий и агрегатора.

Календарные даты всегда разбираются как "только дата", без перевода
в метку времени: иначе дата сдвигается на день в зависимости от
часового пояса машины, на которой выполняется код.
"""
import re
from datetime import date, datetime, timedelta
from typing import Iterator, Optional, Tuple, Union

import pytz

from app.core.errors import InvalidDateError, InvalidDateRangeError

DateLike = Union[date, str]

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

WEEKDAY_NAMES = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")


def parse_calendar_date(value: DateLike) -> date:
    # datetime является подклассом date, но время суток здесь недопустимо
    if isinstance(value, datetime):
        raise InvalidDateError(value, "expected a calendar date, got a timestamp")
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise InvalidDateError(value, f"unsupported type {type(value).__name__}")

    text = value.strip()
    if not _ISO_DATE.match(text):
        raise InvalidDateError(value)
    try:
        return date.fromisoformat(text)
    except ValueError as e:
        raise InvalidDateError(value, str(e)) from e


def parse_timestamp(value: Union[datetime, str]) -> datetime:
    """
    Разбирает время отметки в datetime с часовым поясом.
    Значения без пояса считаются UTC (так их хранит база).
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z") or text.endswith("z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as e:
            raise InvalidDateError(value, "expected an ISO-8601 timestamp") from e
    else:
        raise InvalidDateError(value, f"unsupported timestamp type {type(value).__name__}")

    if parsed.tzinfo is None or parsed.tzinfo.utcoffset(parsed) is None:
        parsed = pytz.utc.localize(parsed)
    return parsed


def weekday_number(day: date) -> int:
    """Номер дня недели: 0 = воскресенье ... 6 = суббота."""
    return (day.weekday() + 1) % 7


def day_label(day: date) -> str:
    return f"{WEEKDAY_NAMES[weekday_number(day)]} {day.day:02d}"


def iter_days(start: date, end: date) -> Iterator[date]:
    if start > end:
        raise InvalidDateRangeError(start, end)
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def get_timezone(name: str):
    try:
        return pytz.timezone(name)
    except pytz.UnknownTimeZoneError as e:
        raise ValueError(f"Unknown timezone {name!r}") from e


def today_in_timezone(tz_name: str, now: Optional[datetime] = None) -> date:
    tz = get_timezone(tz_name)
    moment = parse_timestamp(now) if now is not None else datetime.now(pytz.utc)
    return moment.astimezone(tz).date()


def chart_date_range(days: int, today: date, floor: date) -> Tuple[date, date]:
    """Последние `days` календарных дней до today, но не раньше floor."""
    if days < 1:
        raise ValueError("days must be a positive number")
    start = today - timedelta(days=days - 1)
    return max(start, floor), today
