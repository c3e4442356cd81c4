from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session
from typing import Optional

from app.api.deps import get_cache, get_db, get_policy
from app.core.cache import TTLCache
from app.core.classification import classify
from app.core.dates import parse_calendar_date
from app.core.export import export_attendance_csv
from app.core.policy import AttendancePolicy
from app.crud import attendance as crud_attendance
from app.crud.builder import get_builder, get_builders
from app.schemas.attendance import (
    AttendanceImportResult,
    AttendanceOut,
    AttendanceUpsert,
    BuilderHistoryOut,
    ClassifiedAttendanceOut,
    DayCorrectionResult,
)

router = APIRouter()


# История посещаемости ученика с классификацией
@router.get("/builder/{builder_id}", response_model=BuilderHistoryOut)
def get_builder_history(
    builder_id: str,
    include_non_class_days: bool = False,
    db: Session = Depends(get_db),
    policy: AttendancePolicy = Depends(get_policy),
):
    if not get_builder(db, builder_id):
        raise HTTPException(status_code=404, detail="Ученик не найден")

    records = []
    for record in crud_attendance.get_builder_history(db, builder_id):
        day = policy.calendar.day_info(record.date)
        # Отменённые дни остаются в истории, праздники и выходные нет
        if not (day.is_class_day or day.is_cancelled or include_non_class_days):
            continue
        result = classify(record, policy.schedule)
        records.append(ClassifiedAttendanceOut(
            date=record.date,
            raw_status=record.raw_status.value,
            time_recorded=record.time_recorded,
            excuse_reason=record.excuse_reason,
            notes=record.notes,
            classification=result.scored,
            display_status=result.display,
            is_class_day=day.is_class_day,
            is_cancelled=day.is_cancelled,
        ))
    return BuilderHistoryOut(builder_id=builder_id, records=records)


# Исправление записи задним числом (создать или обновить)
@router.put("/record", response_model=AttendanceOut)
def upsert_attendance_record(
    record: AttendanceUpsert,
    db: Session = Depends(get_db),
    cache: TTLCache = Depends(get_cache),
):
    if not get_builder(db, record.builder_id):
        raise HTTPException(status_code=404, detail="Ученик не найден")

    return crud_attendance.upsert_record(
        db,
        builder_id=record.builder_id,
        day=record.date,
        status=record.status,
        time_recorded=record.time_recorded,
        excuse_reason=record.excuse_reason,
        notes=record.notes,
        cache=cache,
    )


@router.delete("/record/{builder_id}/{day}")
def delete_attendance_record(
    builder_id: str,
    day: str,
    db: Session = Depends(get_db),
    cache: TTLCache = Depends(get_cache),
):
    if not crud_attendance.delete_record(db, builder_id, parse_calendar_date(day), cache=cache):
        raise HTTPException(status_code=404, detail="Запись посещаемости не найдена")
    return {"message": "Запись посещаемости удалена"}


@router.post("/{day}/mark-pending-absent", response_model=DayCorrectionResult)
def mark_pending_absent(
    day: str,
    db: Session = Depends(get_db),
    cache: TTLCache = Depends(get_cache),
    policy: AttendancePolicy = Depends(get_policy),
):
    target = parse_calendar_date(day)
    affected = crud_attendance.mark_pending_as_absent(db, target, policy, cache=cache)
    return DayCorrectionResult(date=target, affected=affected)


# Системные заметки больше не нужны тем, кто всё-таки пришёл
@router.post("/{day}/clear-automated-notes", response_model=DayCorrectionResult)
def clear_automated_notes(
    day: str,
    db: Session = Depends(get_db),
    cache: TTLCache = Depends(get_cache),
):
    target = parse_calendar_date(day)
    affected = crud_attendance.clear_automated_notes(db, target, cache=cache)
    return DayCorrectionResult(date=target, affected=affected)


# Загрузка исторических данных из CSV
@router.post("/import", response_model=AttendanceImportResult)
async def import_attendance(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    cache: TTLCache = Depends(get_cache),
):
    if file.filename and not file.filename.lower().endswith(".csv"):
        raise HTTPException(status_code=400, detail="Нужен файл в формате CSV")

    contents = await file.read()
    try:
        text = contents.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail="Файл должен быть в кодировке UTF-8")

    return crud_attendance.import_attendance_csv(db, text, cache=cache)


@router.get("/export", response_class=PlainTextResponse)
def export_attendance(
    cohort: Optional[str] = None,
    db: Session = Depends(get_db),
    cache: TTLCache = Depends(get_cache),
    policy: AttendancePolicy = Depends(get_policy),
):
    builders = get_builders(db, cohort=cohort)
    records = crud_attendance.fetch_records(
        db,
        builder_ids=[b.id for b in builders],
        start=policy.calendar.start_date,
        cache=cache,
    )
    content = export_attendance_csv(
        [(b.id, b.full_name) for b in builders],
        records,
        policy=policy,
    )
    return PlainTextResponse(
        content,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="attendance_history.csv"'},
    )
