from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional

class BuilderCreate(BaseModel):
    first_name: str
    last_name: str
    student_id: Optional[str] = None
    cohort: Optional[str] = None

class BuilderOut(BuilderCreate):
    id: str
    full_name: str
    notes: Optional[str] = None
    archived_at: Optional[datetime] = None
    archived_reason: Optional[str] = None

    class Config:
        from_attributes = True

class BuilderArchive(BaseModel):
    reason: str = Field(..., min_length=1, max_length=500)  # причина обязательна

    class Config:
        str_strip_whitespace = True

class BuilderNotesUpdate(BaseModel):
    notes: Optional[str] = None
