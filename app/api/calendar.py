# app/api/calendar.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_policy
from app.core.calendar import CalendarDay
from app.core.dates import parse_calendar_date
from app.core.policy import AttendancePolicy
from app.crud import calendar as crud_calendar
from app.schemas.calendar import CancelledDayCreate, CancelledDayOut, ClassDaysOut

router = APIRouter()


@router.get("/class-days", response_model=ClassDaysOut)
def get_class_days(
    start: str,
    end: str,
    policy: AttendancePolicy = Depends(get_policy),
):
    start_date = parse_calendar_date(start)
    end_date = parse_calendar_date(end)
    return ClassDaysOut(
        start=start_date,
        end=end_date,
        class_days=policy.calendar.class_days(start_date, end_date),
    )


@router.get("/cancelled", response_model=List[CancelledDayOut])
def list_cancelled_days(db: Session = Depends(get_db)):
    return crud_calendar.get_cancelled_days(db)


@router.post("/cancelled", response_model=CancelledDayOut)
def add_cancelled_day(
    payload: CancelledDayCreate,
    db: Session = Depends(get_db),
):
    policy = crud_calendar.load_policy(db)
    # Отменить можно только настоящий учебный день
    if payload.date in policy.calendar.holidays:
        raise HTTPException(status_code=400, detail="Этот день уже праздничный")
    if not policy.calendar.is_class_day(payload.date) and not policy.calendar.is_cancelled_class_day(payload.date):
        raise HTTPException(status_code=400, detail="В этот день занятий нет по расписанию")

    cancelled = crud_calendar.add_cancelled_day(db, payload.date, payload.reason)
    return cancelled


@router.delete("/cancelled/{day}")
def remove_cancelled_day(
    day: str,
    db: Session = Depends(get_db),
):
    if not crud_calendar.remove_cancelled_day(db, parse_calendar_date(day)):
        raise HTTPException(status_code=404, detail="Отменённый день не найден")
    return {"message": "Отмена занятия удалена"}


# Должен идти последним: иначе перехватит /class-days и /cancelled
@router.get("/{day}", response_model=CalendarDay)
def get_calendar_day(day: str, policy: AttendancePolicy = Depends(get_policy)):
    return policy.calendar.day_info(day)
