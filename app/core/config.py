# app/core/config.py
from datetime import date, time
from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./builder_tracking.db"
    LOG_LEVEL: str = "INFO"

    CORS_ORIGINS: List[str] = [
        "http://localhost",
        "http://127.0.0.1",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:8080",
    ]

    # Календарь программы. Дни недели считаются с 0 = воскресенье.
    PROGRAM_START_DATE: date = date(2025, 3, 15)
    NON_CLASS_WEEKDAYS: List[int] = [4, 5]  # четверг, пятница
    HOLIDAYS: List[date] = [date(2025, 4, 20)]
    CANCELLED_CLASS_DAYS: List[date] = []

    # Опоздания: время отсечки в часовом поясе программы
    PROGRAM_TIMEZONE: str = "America/New_York"
    WEEKEND_CLASS_WEEKDAYS: List[int] = [0, 6]
    WEEKEND_LATE_CUTOFF: time = time(10, 0)
    WEEKDAY_LATE_CUTOFF: time = time(18, 30)

    CACHE_TTL_SECONDS: int = 900  # 15 минут
    STRICT_DUPLICATES: bool = False

    class Config:
        env_file = ".env"

# Экземпляр создаётся ОДИН РАЗ
settings = Settings()
