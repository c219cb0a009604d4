# tests/conftest.py
from datetime import date

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

import infra.db.models  # noqa: F401
from core.models import Project, WorkingCalendar
from core.services.scheduling import SchedulingConfig, SchedulingEngine
from infra.db.base import Base
from infra.services import build_service_dict

# Monday
PROJECT_START = date(2024, 1, 1)


@pytest.fixture
def session():
    # separate in-memory DB for tests
    engine = create_engine("sqlite:///:memory:", future=True)
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def config():
    return SchedulingConfig()


@pytest.fixture
def default_calendar():
    return WorkingCalendar.create_default()


@pytest.fixture
def engine(config):
    return SchedulingEngine(config)


@pytest.fixture
def services(session, config):
    return build_service_dict(session, config)


@pytest.fixture
def project(services):
    project = Project.create("CPM Test", "Testing CPM", start_date=PROJECT_START)
    services["project_repo"].add(project)
    services["session"].commit()
    return project
