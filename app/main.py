import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api import attendance, builders, calendar, stats
from app.core.cache import TTLCache
from app.core.config import settings
from app.core.errors import (
    AttendanceEngineError,
    DuplicateRecordError,
    NotAClassDayError,
)

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Builder Tracking")
app.state.cache = TTLCache(ttl_seconds=settings.CACHE_TTL_SECONDS)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Ошибки движка: битые даты и статусы дают 422, конфликты с календарём 409
@app.exception_handler(AttendanceEngineError)
async def engine_error_handler(request: Request, exc: AttendanceEngineError):
    status_code = 409 if isinstance(exc, (DuplicateRecordError, NotAClassDayError)) else 422
    logger.warning("%s %s -> %d: %s", request.method, request.url.path, status_code, exc)
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


app.include_router(builders.router, prefix="/api/builders", tags=["builders"])
app.include_router(attendance.router, prefix="/api/attendance", tags=["attendance"])
app.include_router(calendar.router, prefix="/api/calendar", tags=["calendar"])
app.include_router(stats.router, prefix="/api/stats", tags=["stats"])
