# app/core/arrival.py
"""
Опоздания.

Отметка "present" считается опозданием, если она сделана в момент отсечки
или позже. Отсечка зависит от дня недели учебного дня: для занятий выходного
дня она раньше (10:00), для будних позже (18:30). Время сравнивается
только в часовом поясе программы, часовой пояс сервера не используется.
"""
import enum
from datetime import date, datetime, time
from typing import Iterable, Optional, Union

from app.core.config import settings
from app.core.dates import DateLike, get_timezone, parse_calendar_date, parse_timestamp, weekday_number


class ArrivalStatus(str, enum.Enum):
    ON_TIME = "on_time"
    LATE = "late"


class ArrivalSchedule:
    def __init__(
        self,
        timezone: str,
        weekend_weekdays: Iterable[int] = (0, 6),
        weekend_cutoff: time = time(10, 0),
        weekday_cutoff: time = time(18, 30),
    ):
        self.timezone_name = timezone
        self.tz = get_timezone(timezone)
        self.weekend_weekdays = frozenset(weekend_weekdays)
        self.weekend_cutoff = weekend_cutoff
        self.weekday_cutoff = weekday_cutoff

    @classmethod
    def from_settings(cls, settings) -> "ArrivalSchedule":
        return cls(
            timezone=settings.PROGRAM_TIMEZONE,
            weekend_weekdays=settings.WEEKEND_CLASS_WEEKDAYS,
            weekend_cutoff=settings.WEEKEND_LATE_CUTOFF,
            weekday_cutoff=settings.WEEKDAY_LATE_CUTOFF,
        )

    def is_weekend_session(self, day: date) -> bool:
        return weekday_number(day) in self.weekend_weekdays

    def cutoff_for(self, day: DateLike) -> datetime:
        """Момент начала опоздания для учебного дня, в часовом поясе программы."""
        parsed = parse_calendar_date(day)
        cutoff = self.weekend_cutoff if self.is_weekend_session(parsed) else self.weekday_cutoff
        # localize, а не replace(tzinfo=...): у pytz иначе получится LMT-смещение
        return self.tz.localize(datetime.combine(parsed, cutoff))

    def classify_arrival(
        self, day: DateLike, time_recorded: Optional[Union[datetime, str]]
    ) -> ArrivalStatus:
        # Без времени отметки опоздание определить нельзя
        if time_recorded is None:
            return ArrivalStatus.ON_TIME
        recorded = parse_timestamp(time_recorded)
        if recorded >= self.cutoff_for(day):
            return ArrivalStatus.LATE
        return ArrivalStatus.ON_TIME

    def __repr__(self):
        return (
            f"ArrivalSchedule(timezone={self.timezone_name!r}, "
            f"weekend_cutoff={self.weekend_cutoff.isoformat()}, "
            f"weekday_cutoff={self.weekday_cutoff.isoformat()})"
        )


def default_schedule() -> ArrivalSchedule:
    return ArrivalSchedule.from_settings(settings)


def classify_arrival(
    day: DateLike,
    time_recorded: Optional[Union[datetime, str]],
    schedule: Optional[ArrivalSchedule] = None,
) -> ArrivalStatus:
    return (schedule or default_schedule()).classify_arrival(day, time_recorded)
