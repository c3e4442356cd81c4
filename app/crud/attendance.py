# app/crud/attendance.py
import csv
import hashlib
import io
import logging
from collections import defaultdict
from datetime import date
from typing import Dict, Iterable, List, Optional, Tuple

import pytz
from sqlalchemy.orm import Session

from app.core.cache import TTLCache
from app.core.classification import AttendanceRecord, RawStatus, has_excuse, parse_raw_status
from app.core.dates import parse_calendar_date, parse_timestamp
from app.core.errors import AttendanceEngineError, ImportFormatError, NotAClassDayError
from app.core.policy import AttendancePolicy
from app.db.models.attendance import Attendance
from app.db.models.builder import Builder

logger = logging.getLogger(__name__)

CACHE_PREFIX = "attendance:"

AUTO_ABSENT_NOTE = "Automatically marked absent by system"
PENDING_TO_ABSENT_NOTE = "Automatically updated from pending to absent"


def _cache_key(builder_ids: Optional[Iterable[str]], start: Optional[date], end: Optional[date]) -> str:
    ids = "*" if builder_ids is None else ",".join(sorted(builder_ids))
    digest = hashlib.sha1(ids.encode("utf-8")).hexdigest()[:16]
    return f"{CACHE_PREFIX}{digest}:{start or '-'}:{end or '-'}"


def _to_utc(value):
    # SQLite не хранит смещение, поэтому в базу всегда пишем UTC
    if value is None:
        return None
    return parse_timestamp(value).astimezone(pytz.utc)


def deduplicate(records: Iterable[AttendanceRecord]) -> List[AttendanceRecord]:
    """Одна запись на (builder_id, date): при повторах остаётся последняя."""
    unique: Dict[Tuple[str, date], AttendanceRecord] = {}
    for record in records:
        unique[record.key] = record
    return list(unique.values())


def _query_records(
    db: Session, builder_ids: Optional[List[str]], start: Optional[date], end: Optional[date]
) -> List[AttendanceRecord]:
    query = db.query(Attendance)
    if builder_ids is not None:
        if not builder_ids:
            return []
        query = query.filter(Attendance.student_id.in_(builder_ids))
    if start is not None:
        query = query.filter(Attendance.date >= start)
    if end is not None:
        query = query.filter(Attendance.date <= end)
    rows = query.order_by(Attendance.date, Attendance.updated_at, Attendance.id).all()
    return deduplicate(AttendanceRecord.from_row(row.to_row()) for row in rows)


def fetch_records(
    db: Session,
    builder_ids: Optional[Iterable[str]] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
    cache: Optional[TTLCache] = None,
) -> List[AttendanceRecord]:
    """
    Выборка записей по ученикам и диапазону дат. Фильтрация по учебным дням
    здесь не делается, это работа движка.
    """
    ids = list(builder_ids) if builder_ids is not None else None
    if cache is None:
        return _query_records(db, ids, start, end)
    return cache.get_or_set(_cache_key(ids, start, end), lambda: _query_records(db, ids, start, end))


def get_builder_history(db: Session, builder_id: str) -> List[AttendanceRecord]:
    rows = (
        db.query(Attendance)
        .filter(Attendance.student_id == builder_id)
        .order_by(Attendance.date.desc())
        .all()
    )
    return [AttendanceRecord.from_row(row.to_row()) for row in rows]


def get_record(db: Session, builder_id: str, day: date) -> Optional[Attendance]:
    return db.query(Attendance).filter(
        Attendance.student_id == builder_id,
        Attendance.date == day,
    ).first()


def upsert_record(
    db: Session,
    builder_id: str,
    day: date,
    status,
    time_recorded=None,
    excuse_reason: Optional[str] = None,
    notes: Optional[str] = None,
    cache: Optional[TTLCache] = None,
) -> Attendance:
    raw_status = parse_raw_status(status)
    recorded_at = _to_utc(time_recorded)

    # Находим или создаём запись
    existing = get_record(db, builder_id, day)
    if existing:
        existing.status = raw_status.value
        existing.time_recorded = recorded_at
        existing.excuse_reason = excuse_reason
        existing.notes = notes
    else:
        existing = Attendance(
            student_id=builder_id,
            date=day,
            status=raw_status.value,
            time_recorded=recorded_at,
            excuse_reason=excuse_reason,
            notes=notes,
        )
        db.add(existing)

    db.commit()
    db.refresh(existing)
    _invalidate(cache)
    logger.info("Attendance for %s on %s set to %s", builder_id, day.isoformat(), raw_status.value)
    return existing


def delete_record(db: Session, builder_id: str, day: date, cache: Optional[TTLCache] = None) -> bool:
    existing = get_record(db, builder_id, day)
    if not existing:
        return False
    db.delete(existing)
    db.commit()
    _invalidate(cache)
    logger.info("Attendance for %s on %s deleted", builder_id, day.isoformat())
    return True


def mark_pending_as_absent(
    db: Session, day: date, policy: AttendancePolicy, cache: Optional[TTLCache] = None
) -> int:
    """
    Закрывает день: pending -> absent, а активным ученикам без записи
    создаётся запись absent. Только для учебных дней.
    Возвращает число изменённых и созданных записей.
    """
    if not policy.calendar.is_class_day(day):
        raise NotAClassDayError(day)

    builders = db.query(Builder).filter(Builder.archived_at.is_(None)).all()
    existing = {
        row.student_id: row
        for row in db.query(Attendance).filter(Attendance.date == day).all()
    }

    updated = 0
    created = 0
    for builder in builders:
        row = existing.get(builder.id)
        if row is None:
            db.add(Attendance(
                student_id=builder.id,
                date=day,
                status=RawStatus.ABSENT.value,
                notes=AUTO_ABSENT_NOTE,
            ))
            created += 1
        elif row.status == RawStatus.PENDING.value:
            row.status = RawStatus.ABSENT.value
            row.notes = PENDING_TO_ABSENT_NOTE
            updated += 1

    if updated or created:
        db.commit()
        _invalidate(cache)
    logger.info(
        "✅ Pending attendance closed for %s: %d updated, %d created",
        day.isoformat(), updated, created,
    )
    return updated + created


def _invalidate(cache: Optional[TTLCache]):
    if cache is not None:
        cache.invalidate_prefix(CACHE_PREFIX)


IMPORT_REQUIRED_COLUMNS = ("first_name", "last_name", "date", "status")

AUTOMATED_NOTE_MARKERS = ("automatically marked", "auto marked", "marked absent by system", "automatically updated")


def import_attendance_csv(db: Session, content: str, cache: Optional[TTLCache] = None) -> dict:
    """
    Импорт исторических записей из CSV.

    Колонки: first_name, last_name, date (YYYY-MM-DD), status; необязательные:
    time_recorded, excuse_reason, notes. Ученик ищется по имени и фамилии без
    учёта регистра, существующая запись за тот же день перезаписывается.
    Строки с ошибками пропускаются и попадают в errors (номер строки файла
    с учётом заголовка).
    """
    reader = csv.DictReader(io.StringIO(content))
    if reader.fieldnames is None:
        raise ImportFormatError("Import file is empty")
    reader.fieldnames = [name.strip().lower() for name in reader.fieldnames]
    missing = [column for column in IMPORT_REQUIRED_COLUMNS if column not in reader.fieldnames]
    if missing:
        raise ImportFormatError(f"Import file is missing columns: {', '.join(missing)}")

    by_name: Dict[str, List[str]] = defaultdict(list)
    for builder in db.query(Builder).all():
        by_name[_name_key(builder.first_name, builder.last_name)].append(builder.id)

    imported = 0
    errors = []
    for row_num, row in enumerate(reader, start=2):
        values = {key: (value or "").strip() for key, value in row.items() if key}
        if not any(values.values()):
            continue

        first_name, last_name = values["first_name"], values["last_name"]
        matches = by_name.get(_name_key(first_name, last_name), [])
        if len(matches) != 1:
            reason = "no matching builder" if not matches else "more than one builder has this name"
            errors.append({"row": row_num, "error": f"{first_name} {last_name}: {reason}"})
            continue

        try:
            upsert_record(
                db,
                builder_id=matches[0],
                day=parse_calendar_date(values["date"]),
                status=values["status"],
                time_recorded=values.get("time_recorded") or None,
                excuse_reason=values.get("excuse_reason") or None,
                notes=values.get("notes") or None,
            )
        except AttendanceEngineError as e:
            errors.append({"row": row_num, "error": str(e)})
            continue
        imported += 1

    if imported:
        _invalidate(cache)
    logger.info("✅ Attendance import finished: %d imported, %d failed", imported, len(errors))
    return {"imported": imported, "failed": len(errors), "errors": errors}


def _name_key(first_name: str, last_name: str) -> str:
    return f"{first_name.strip().lower()} {last_name.strip().lower()}"


def is_automated_note(notes: Optional[str]) -> bool:
    text = (notes or "").lower()
    return any(marker in text for marker in AUTOMATED_NOTE_MARKERS)


def clear_automated_notes(db: Session, day: date, cache: Optional[TTLCache] = None) -> int:
    """
    Убирает системные заметки ("Automatically marked absent...") с записей
    за день, где ученик всё-таки пришёл или отсутствовал по уважительной
    причине. У уважительных отсутствий в заметку переносится причина.
    """
    rows = (
        db.query(Attendance)
        .filter(Attendance.date == day, Attendance.notes.isnot(None))
        .all()
    )

    cleared = 0
    for row in rows:
        if not is_automated_note(row.notes):
            continue
        if row.status in (RawStatus.PRESENT.value, RawStatus.LATE.value):
            row.notes = None
        elif row.status == RawStatus.ABSENT.value and has_excuse(row.excuse_reason):
            row.notes = row.excuse_reason
        else:
            continue
        cleared += 1

    if cleared:
        db.commit()
        _invalidate(cache)
    logger.info("✅ Automated notes cleared for %s: %d records", day.isoformat(), cleared)
    return cleared
