# app/api/stats.py
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.api.deps import get_cache, get_db, get_policy
from app.core.aggregation import (
    DailyAggregate,
    DaySummary,
    aggregate_by_builder,
    aggregate_by_day,
    summarize_day,
)
from app.core.cache import TTLCache
from app.core.config import settings
from app.core.dates import chart_date_range, parse_calendar_date
from app.core.policy import AttendancePolicy
from app.crud.attendance import fetch_records
from app.crud.builder import get_builders
from app.schemas.stats import BuilderRateOut

router = APIRouter()
logger = logging.getLogger(__name__)

MAX_CHART_DAYS = 366


# Данные для графика: строка на каждый учебный день
@router.get("/daily", response_model=List[DailyAggregate])
def get_daily_stats(
    days: int = Query(7, ge=1, le=MAX_CHART_DAYS),
    start: Optional[str] = None,
    end: Optional[str] = None,
    cohort: Optional[str] = None,
    db: Session = Depends(get_db),
    cache: TTLCache = Depends(get_cache),
    policy: AttendancePolicy = Depends(get_policy),
):
    if (start is None) != (end is None):
        raise HTTPException(status_code=400, detail="Нужно указать и start, и end")

    if start is not None:
        start_date, end_date = parse_calendar_date(start), parse_calendar_date(end)
        if (end_date - start_date).days + 1 > MAX_CHART_DAYS:
            raise HTTPException(status_code=400, detail=f"Диапазон не может быть больше {MAX_CHART_DAYS} дней")
    else:
        start_date, end_date = chart_date_range(days, policy.today(), policy.calendar.start_date)
        if start_date > end_date:
            # программа ещё не началась
            return []

    builder_ids = [b.id for b in get_builders(db, cohort=cohort)]
    records = fetch_records(db, builder_ids=builder_ids, start=start_date, end=end_date, cache=cache)
    logger.debug("Daily stats %s..%s over %d records", start_date, end_date, len(records))

    return aggregate_by_day(
        records,
        start_date,
        end_date,
        builder_ids=builder_ids,
        policy=policy,
        strict=settings.STRICT_DUPLICATES,
    )


@router.get("/builders", response_model=List[BuilderRateOut])
def get_builder_rates(
    cohort: Optional[str] = None,
    db: Session = Depends(get_db),
    cache: TTLCache = Depends(get_cache),
    policy: AttendancePolicy = Depends(get_policy),
):
    builders = get_builders(db, cohort=cohort)
    today = policy.today()
    records = fetch_records(
        db,
        builder_ids=[b.id for b in builders],
        start=policy.calendar.start_date,
        end=today,
        cache=cache,
    )
    rates = aggregate_by_builder(records, [b.id for b in builders], policy=policy, today=today)

    return [
        BuilderRateOut(full_name=b.full_name, **rates[b.id].model_dump())
        for b in builders
    ]


# Сводка на главную страницу
@router.get("/today", response_model=DaySummary)
def get_today_stats(
    cohort: Optional[str] = None,
    db: Session = Depends(get_db),
    policy: AttendancePolicy = Depends(get_policy),
):
    builders = get_builders(db, cohort=cohort)
    today = policy.today()
    records = fetch_records(db, builder_ids=[b.id for b in builders], start=today, end=today)
    return summarize_day(records, today, total_builders=len(builders), policy=policy)
