from datetime import time

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.api.deps import get_db
from app.core.arrival import ArrivalSchedule
from app.core.calendar import ProgramCalendar
from app.core.policy import AttendancePolicy
from app.db import Base
from app.db.models.builder import Builder
from app.main import app


@pytest.fixture
def calendar():
    return ProgramCalendar(
        start_date="2025-03-15",
        non_class_weekdays=[4, 5],
        holidays=["2025-04-20"],
    )


@pytest.fixture
def schedule():
    return ArrivalSchedule(
        timezone="America/New_York",
        weekend_weekdays=[0, 6],
        weekend_cutoff=time(10, 0),
        weekday_cutoff=time(18, 30),
    )


@pytest.fixture
def policy(calendar, schedule):
    return AttendancePolicy(calendar, schedule)


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(bind=engine, autocommit=False, autoflush=False)
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def builders(db):
    rows = [
        Builder(id="b1", first_name="Ada", last_name="Lovelace", cohort="March 2025 Pilot"),
        Builder(id="b2", first_name="Grace", last_name="Hopper", cohort="March 2025 Pilot"),
        Builder(id="b3", first_name="Alan", last_name="Turing", cohort="June 2025"),
    ]
    db.add_all(rows)
    db.commit()
    return rows


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.state.cache.clear()
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    app.state.cache.clear()
