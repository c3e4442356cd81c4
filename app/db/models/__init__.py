from app.db.base import Base
from app.db.models.builder import Builder
from app.db.models.attendance import Attendance
from app.db.models.cancelled_day import CancelledDay

__all__ = ["Base", "Builder", "Attendance", "CancelledDay"]
