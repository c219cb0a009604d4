from __future__ import annotations

import logging
from datetime import time

import pytest
from sqlalchemy import inspect

from core.exceptions import ValidationError
from core.services.scheduling import SchedulingConfig
from infra import version as version_mod
from infra.db.base import make_engine, resolve_db_url
from infra.logging_config import setup_logging
from infra.migrate import run_migrations
from infra.path import default_db_path, user_data_dir
from infra.services import build_service_graph


def test_scheduling_config_defaults(monkeypatch):
    for name in (
        "PM_DEFAULT_HOURS_PER_DAY",
        "PM_DEFAULT_WORKING_DAYS",
        "PM_DEFAULT_DAY_START",
        "PM_SCHEDULE_BUFFER_PERCENT",
    ):
        monkeypatch.delenv(name, raising=False)

    config = SchedulingConfig.from_env()

    assert config.default_calendar.hours_per_day == 8.0
    assert config.default_calendar.working_days == frozenset({0, 1, 2, 3, 4})
    assert config.default_calendar.day_start == time(9, 0)
    assert config.buffer_percent == 0.0


def test_scheduling_config_from_env(monkeypatch):
    monkeypatch.setenv("PM_DEFAULT_HOURS_PER_DAY", "6")
    monkeypatch.setenv("PM_DEFAULT_WORKING_DAYS", "0,1,2,3")
    monkeypatch.setenv("PM_DEFAULT_DAY_START", "08:30")
    monkeypatch.setenv("PM_SCHEDULE_BUFFER_PERCENT", "10")

    config = SchedulingConfig.from_env()

    assert config.default_calendar.hours_per_day == 6.0
    assert config.default_calendar.working_days == frozenset({0, 1, 2, 3})
    assert config.default_calendar.day_start == time(8, 30)
    assert config.buffer_percent == 10.0


@pytest.mark.parametrize(
    "name, value",
    [
        ("PM_DEFAULT_HOURS_PER_DAY", "eight"),
        ("PM_DEFAULT_DAY_START", "9am"),
        ("PM_SCHEDULE_BUFFER_PERCENT", "-5"),
        ("PM_DEFAULT_HOURS_PER_DAY", "30"),
    ],
)
def test_invalid_scheduling_config_is_rejected(monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(ValidationError):
        SchedulingConfig.from_env()


def test_service_graph_uses_given_config(session):
    config = SchedulingConfig(buffer_percent=5)
    graph = build_service_graph(session, config)

    assert graph.scheduling_engine.config is config
    assert set(graph.as_dict()) >= {"task_service", "scheduling_service", "scheduling_engine"}


def test_get_app_version_prefers_env_override(monkeypatch):
    monkeypatch.setenv("PM_APP_VERSION", "9.9.9")
    assert version_mod.get_app_version() == "9.9.9"


def test_get_app_version_without_override(monkeypatch):
    monkeypatch.delenv("PM_APP_VERSION", raising=False)
    assert version_mod.get_app_version()


def test_data_dir_and_db_url_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("PM_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.delenv("PM_DB_URL", raising=False)

    assert user_data_dir() == tmp_path / "data"
    assert default_db_path() == tmp_path / "data" / "schedule.db"
    assert resolve_db_url() == f"sqlite:///{(tmp_path / 'data' / 'schedule.db').as_posix()}"

    monkeypatch.setenv("PM_DB_URL", "sqlite:///:memory:")
    assert resolve_db_url() == "sqlite:///:memory:"


def test_setup_logging_writes_rotating_file(tmp_path):
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        log_file = setup_logging(log_dir=tmp_path)
        logging.getLogger("pm.test").info("hello scheduling")
        for handler in root.handlers:
            handler.flush()
        assert log_file == tmp_path / "app.log"
        assert "hello scheduling" in log_file.read_text(encoding="utf-8")
        assert "trace=-" in log_file.read_text(encoding="utf-8")
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)


def test_migrations_create_schema(tmp_path):
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    url = f"sqlite:///{(tmp_path / 'migrated.db').as_posix()}"
    try:
        run_migrations(url)
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)

    tables = set(inspect(make_engine(url)).get_table_names())
    assert {
        "projects",
        "working_calendars",
        "holidays",
        "calendar_exceptions",
        "resources",
        "tasks",
        "milestones",
        "task_dependencies",
        "task_assignments",
        "progress_entries",
    } <= tables
