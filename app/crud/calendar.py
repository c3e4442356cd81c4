# app/crud/calendar.py
from datetime import date
from typing import List, Optional

from sqlalchemy.orm import Session

from app.core.policy import AttendancePolicy
from app.db.models.cancelled_day import CancelledDay


def get_cancelled_days(db: Session) -> List[CancelledDay]:
    return db.query(CancelledDay).order_by(CancelledDay.date).all()


def get_cancelled_day(db: Session, day: date) -> Optional[CancelledDay]:
    return db.query(CancelledDay).filter(CancelledDay.date == day).first()


def add_cancelled_day(db: Session, day: date, reason: str) -> CancelledDay:
    existing = get_cancelled_day(db, day)
    if existing:
        existing.reason = reason
    else:
        existing = CancelledDay(date=day, reason=reason)
        db.add(existing)
    db.commit()
    db.refresh(existing)
    return existing


def remove_cancelled_day(db: Session, day: date) -> bool:
    existing = get_cancelled_day(db, day)
    if not existing:
        return False
    db.delete(existing)
    db.commit()
    return True


def load_policy(db: Session, base: Optional[AttendancePolicy] = None) -> AttendancePolicy:
    """Политика из настроек плюс отменённые дни, сохранённые в базе."""
    base = base or AttendancePolicy.from_settings()
    return base.with_cancelled_days(row.date for row in get_cancelled_days(db))
