# app/core/classification.py
"""
Нормализация записей посещаемости.

В базе хранится "сырой" статус: present / absent / pending / late, а
уважительная причина отсутствия лежит отдельно, в excuse_reason. Этот модуль -
единственное место, где сырой статус превращается в итоговую классификацию.

Есть два представления одной записи:
  - scored - для расчёта статистики: pending считается как absent;
  - display - для интерфейса: pending остаётся pending ("ждём отметку").
"""
import enum
from datetime import date, datetime
from typing import Any, Mapping, Optional

from pydantic import BaseModel

from app.core.arrival import ArrivalSchedule, ArrivalStatus, default_schedule
from app.core.dates import parse_calendar_date, parse_timestamp
from app.core.errors import InvalidStatusError


class RawStatus(str, enum.Enum):
    PRESENT = "present"
    ABSENT = "absent"
    PENDING = "pending"
    LATE = "late"


class Classification(str, enum.Enum):
    PRESENT = "present"
    LATE = "late"
    ABSENT = "absent"
    EXCUSED = "excused"


class DisplayClassification(str, enum.Enum):
    PRESENT = "present"
    LATE = "late"
    ABSENT = "absent"
    EXCUSED = "excused"
    PENDING = "pending"


def parse_raw_status(value: Any) -> RawStatus:
    if isinstance(value, RawStatus):
        return value
    if not isinstance(value, str):
        raise InvalidStatusError(value)
    try:
        return RawStatus(value.strip().lower())
    except ValueError:
        raise InvalidStatusError(value) from None


def has_excuse(excuse_reason: Optional[str]) -> bool:
    return bool(excuse_reason and excuse_reason.strip())


class AttendanceRecord(BaseModel):
    builder_id: str
    date: date
    raw_status: RawStatus
    time_recorded: Optional[datetime] = None
    excuse_reason: Optional[str] = None
    notes: Optional[str] = None

    class Config:
        frozen = True

    def __init__(self, **data):
        # те же правила разбора, что и для строк из базы
        if "date" in data:
            data["date"] = parse_calendar_date(data["date"])
        if "raw_status" in data:
            data["raw_status"] = parse_raw_status(data["raw_status"])
        if data.get("time_recorded") is not None:
            data["time_recorded"] = parse_timestamp(data["time_recorded"])
        super().__init__(**data)

    @property
    def key(self):
        return self.builder_id, self.date

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "AttendanceRecord":
        """
        Строит запись из строки хранилища (dict). Ключ ученика может
        называться student_id (как в таблице) или builder_id.
        Битые даты и статусы: InvalidDateError / InvalidStatusError.
        """
        builder_id = row.get("builder_id", row.get("student_id"))
        if builder_id is None:
            raise ValueError("Attendance row has no builder_id/student_id")
        return cls(
            builder_id=str(builder_id),
            date=row.get("date"),
            raw_status=row.get("status", row.get("raw_status")),
            time_recorded=row.get("time_recorded"),
            excuse_reason=row.get("excuse_reason"),
            notes=row.get("notes"),
        )


class ClassificationResult(BaseModel):
    scored: Classification
    display: DisplayClassification


def display_classification(
    record: AttendanceRecord, schedule: Optional[ArrivalSchedule] = None
) -> DisplayClassification:
    status = parse_raw_status(record.raw_status)

    if status == RawStatus.PRESENT:
        arrival = (schedule or default_schedule()).classify_arrival(record.date, record.time_recorded)
        if arrival == ArrivalStatus.LATE:
            return DisplayClassification.LATE
        return DisplayClassification.PRESENT
    if status == RawStatus.LATE:
        return DisplayClassification.LATE
    if status == RawStatus.ABSENT:
        if has_excuse(record.excuse_reason):
            return DisplayClassification.EXCUSED
        return DisplayClassification.ABSENT
    return DisplayClassification.PENDING


def _scored(display: DisplayClassification) -> Classification:
    if display == DisplayClassification.PENDING:
        return Classification.ABSENT
    return Classification(display.value)


def normalize(record: AttendanceRecord, schedule: Optional[ArrivalSchedule] = None) -> Classification:
    """Классификация для статистики: pending считается отсутствием."""
    return _scored(display_classification(record, schedule))


def classify(record: AttendanceRecord, schedule: Optional[ArrivalSchedule] = None) -> ClassificationResult:
    display = display_classification(record, schedule)
    return ClassificationResult(scored=_scored(display), display=display)
