# app/crud/builder.py
import logging
from datetime import datetime
from typing import List, Optional

import pytz
from sqlalchemy.orm import Session

from app.db.models.builder import Builder

logger = logging.getLogger(__name__)


def get_builder(db: Session, builder_id: str) -> Optional[Builder]:
    return db.query(Builder).filter(Builder.id == builder_id).first()


def get_builders(db: Session, cohort: Optional[str] = None, include_archived: bool = False) -> List[Builder]:
    query = db.query(Builder)
    if cohort:
        query = query.filter(Builder.cohort == cohort)
    if not include_archived:
        query = query.filter(Builder.archived_at.is_(None))
    return query.order_by(Builder.last_name, Builder.first_name).all()


def create_builder(db: Session, builder_data) -> Builder:
    db_builder = Builder(
        first_name=builder_data.first_name,
        last_name=builder_data.last_name,
        student_id=builder_data.student_id,
        cohort=builder_data.cohort,
    )
    db.add(db_builder)
    db.commit()
    db.refresh(db_builder)
    return db_builder


def get_archived_builders(db: Session) -> List[Builder]:
    return (
        db.query(Builder)
        .filter(Builder.archived_at.isnot(None))
        .order_by(Builder.archived_at.desc())
        .all()
    )


def archive_builder(db: Session, builder: Builder, reason: str) -> Builder:
    # Записи посещаемости остаются, ученик только пропадает из активных списков
    builder.archived_at = datetime.now(pytz.utc)
    builder.archived_reason = reason
    db.commit()
    db.refresh(builder)
    logger.info("Builder %s archived: %s", builder.id, reason)
    return builder


def unarchive_builder(db: Session, builder: Builder) -> Builder:
    builder.archived_at = None
    builder.archived_reason = None
    db.commit()
    db.refresh(builder)
    logger.info("Builder %s restored from archive", builder.id)
    return builder


def update_builder_notes(db: Session, builder: Builder, notes: Optional[str]) -> Builder:
    builder.notes = notes
    db.commit()
    db.refresh(builder)
    return builder
