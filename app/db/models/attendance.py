# app/db/models/attendance.py
from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.db.base import Base


class Attendance(Base):
    __tablename__ = "attendance"
    __table_args__ = (
        # Одна запись на ученика в день
        UniqueConstraint("student_id", "date", name="uq_attendance_student_date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(String(36), ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)  # например, 2025-03-15

    # Сырой статус:
    # "pending": ещё не отмечен
    # "present": пришёл (опоздание вычисляется по time_recorded)
    # "late": опоздал (выставлено вручную)
    # "absent": отсутствовал; с excuse_reason по уважительной причине
    status = Column(String, nullable=False, default="pending")
    time_recorded = Column(DateTime(timezone=True), nullable=True)
    excuse_reason = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    builder = relationship("Builder", back_populates="attendance_records")

    def to_row(self) -> dict:
        return {
            "student_id": self.student_id,
            "date": self.date,
            "status": self.status,
            "time_recorded": self.time_recorded,
            "excuse_reason": self.excuse_reason,
            "notes": self.notes,
        }
