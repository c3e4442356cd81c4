# app/db/__init__.py
# Этот файл гарантирует, что все модели импортированы при первом импорте app.db

from app.db.base import Base
from app.db.models.builder import Builder
from app.db.models.attendance import Attendance
from app.db.models.cancelled_day import CancelledDay

# Экспортируем Base и модели наружу
__all__ = ["Base", "Builder", "Attendance", "CancelledDay"]
