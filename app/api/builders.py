# app/api/builders.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List, Optional

from app.api.deps import get_db
from app.crud import builder as crud_builder
from app.schemas.builder import BuilderArchive, BuilderCreate, BuilderNotesUpdate, BuilderOut

router = APIRouter()


@router.get("/", response_model=List[BuilderOut])
def list_builders(
    cohort: Optional[str] = None,
    include_archived: bool = False,
    db: Session = Depends(get_db),
):
    return crud_builder.get_builders(db, cohort=cohort, include_archived=include_archived)


@router.post("/", response_model=BuilderOut)
def create_builder(builder_in: BuilderCreate, db: Session = Depends(get_db)):
    return crud_builder.create_builder(db, builder_in)


# Архив: сначала последние архивированные
@router.get("/archived", response_model=List[BuilderOut])
def list_archived_builders(db: Session = Depends(get_db)):
    return crud_builder.get_archived_builders(db)


def _get_builder_or_404(db: Session, builder_id: str):
    builder = crud_builder.get_builder(db, builder_id)
    if not builder:
        raise HTTPException(status_code=404, detail="Ученик не найден")
    return builder


@router.patch("/{builder_id}/archive", response_model=BuilderOut)
def archive_builder(builder_id: str, payload: BuilderArchive, db: Session = Depends(get_db)):
    builder = _get_builder_or_404(db, builder_id)
    if builder.archived_at is not None:
        raise HTTPException(status_code=400, detail="Ученик уже в архиве")
    return crud_builder.archive_builder(db, builder, payload.reason)


@router.patch("/{builder_id}/unarchive", response_model=BuilderOut)
def unarchive_builder(builder_id: str, db: Session = Depends(get_db)):
    builder = _get_builder_or_404(db, builder_id)
    if builder.archived_at is None:
        raise HTTPException(status_code=400, detail="Ученик не в архиве")
    return crud_builder.unarchive_builder(db, builder)


@router.patch("/{builder_id}/notes", response_model=BuilderOut)
def update_builder_notes(builder_id: str, payload: BuilderNotesUpdate, db: Session = Depends(get_db)):
    builder = _get_builder_or_404(db, builder_id)
    return crud_builder.update_builder_notes(db, builder, payload.notes)
