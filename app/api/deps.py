# app/api/deps.py
from typing import Generator

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from app.core.cache import TTLCache
from app.core.policy import AttendancePolicy
from app.crud.calendar import load_policy
from app.db.session import SessionLocal


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_cache(request: Request) -> TTLCache:
    return request.app.state.cache


def get_policy(db: Session = Depends(get_db)) -> AttendancePolicy:
    return load_policy(db)
