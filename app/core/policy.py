# app/core/policy.py
from typing import Optional

from app.core.arrival import ArrivalSchedule
from app.core.calendar import ProgramCalendar
from app.core.config import settings as app_settings
from app.core.dates import today_in_timezone


class AttendancePolicy:
    """Календарь и расписание опозданий одной когорты."""

    def __init__(self, calendar: ProgramCalendar, schedule: ArrivalSchedule):
        self.calendar = calendar
        self.schedule = schedule

    @classmethod
    def from_settings(cls, settings=None) -> "AttendancePolicy":
        settings = settings or app_settings
        return cls(
            calendar=ProgramCalendar.from_settings(settings),
            schedule=ArrivalSchedule.from_settings(settings),
        )

    def with_cancelled_days(self, days) -> "AttendancePolicy":
        return AttendancePolicy(self.calendar.with_cancelled_days(days), self.schedule)

    def today(self, now=None):
        return today_in_timezone(self.schedule.timezone_name, now)

    def __repr__(self):
        return f"AttendancePolicy({self.calendar!r}, {self.schedule!r})"


def resolve_policy(policy: Optional[AttendancePolicy] = None) -> AttendancePolicy:
    return policy or AttendancePolicy.from_settings()
