from pydantic import BaseModel, Field
from datetime import date, datetime
from typing import Optional

from app.core.classification import Classification, DisplayClassification


class AttendanceBase(BaseModel):
    date: date
    status: str  # present / absent / pending / late
    time_recorded: Optional[datetime] = None
    excuse_reason: Optional[str] = None
    notes: Optional[str] = None

class AttendanceUpsert(AttendanceBase):
    builder_id: str

class AttendanceOut(AttendanceBase):
    id: int
    student_id: str

    class Config:
        from_attributes = True

class ClassifiedAttendanceOut(BaseModel):
    date: date
    raw_status: str
    time_recorded: Optional[datetime] = None
    excuse_reason: Optional[str] = None
    notes: Optional[str] = None
    classification: Classification
    display_status: DisplayClassification
    is_class_day: bool
    is_cancelled: bool

class BuilderHistoryOut(BaseModel):
    builder_id: str
    records: list[ClassifiedAttendanceOut] = Field(default_factory=list)

class DayCorrectionResult(BaseModel):
    date: date
    affected: int

class ImportRowError(BaseModel):
    row: int
    error: str

class AttendanceImportResult(BaseModel):
    imported: int
    failed: int
    errors: list[ImportRowError] = Field(default_factory=list)
