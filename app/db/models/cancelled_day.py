# app/db/models/cancelled_day.py
from sqlalchemy import Column, Date, DateTime, Integer, String
from sqlalchemy.sql import func

from app.db.base import Base


class CancelledDay(Base):
    __tablename__ = "cancelled_days"

    id = Column(Integer, primary_key=True, index=True)
    date = Column(Date, unique=True, nullable=False)  # одна отмена на день
    reason = Column(String(100), nullable=False)  # погода, мероприятие и т.п.
    created_at = Column(DateTime(timezone=True), server_default=func.now())
