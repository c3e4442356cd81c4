from pydantic import BaseModel, Field
from datetime import date
from typing import List

class CancelledDayCreate(BaseModel):
    date: date
    reason: str = Field(..., min_length=3, max_length=100)

class CancelledDayOut(CancelledDayCreate):
    id: int

    class Config:
        from_attributes = True

class ClassDaysOut(BaseModel):
    start: date
    end: date
    class_days: List[date]
