from datetime import date, datetime

import pytest

from core.exceptions import NotFoundError, ValidationError
from core.models import Task


def test_progress_appends_history():
    task = Task(id="t", name="T")

    task = task.record_progress(0.25, datetime(2024, 1, 2, 10, 0))
    task = task.record_progress(0.25, datetime(2024, 1, 3, 10, 0))
    task = task.record_progress(0.6, datetime(2024, 1, 4, 10, 0))

    assert task.percent_complete == 0.6
    assert [e.percent_complete for e in task.percent_complete_history] == [0.25, 0.25, 0.6]


def test_progress_never_goes_backwards():
    task = Task(id="t", name="T").record_progress(0.5, datetime(2024, 1, 2))

    with pytest.raises(ValidationError) as exc:
        task.record_progress(0.4, datetime(2024, 1, 3))
    assert exc.value.code == "TASK_PROGRESS_DECREASED"


def test_progress_entries_must_be_chronological():
    task = Task(id="t", name="T").record_progress(0.5, datetime(2024, 1, 5))

    with pytest.raises(ValidationError) as exc:
        task.record_progress(0.6, datetime(2024, 1, 4))
    assert exc.value.code == "TASK_PROGRESS_OUT_OF_ORDER"


@pytest.mark.parametrize("value", [-0.1, 1.01])
def test_progress_must_be_a_fraction(value):
    with pytest.raises(ValidationError) as exc:
        Task(id="t", name="T").record_progress(value, datetime(2024, 1, 2))
    assert exc.value.code == "TASK_PERCENT_RANGE"


def test_task_validation_rules():
    with pytest.raises(ValidationError):
        Task(id="t", name="  ").validate()
    with pytest.raises(ValidationError) as exc:
        Task(id="t", name="T", scheduled_start=date(2024, 1, 5), deadline=date(2024, 1, 1)).validate()
    assert exc.value.code == "TASK_DEADLINE_BEFORE_START"
    with pytest.raises(ValidationError) as exc:
        Task(id="t", name="T", duration_days=-1).validate()
    assert exc.value.code == "TASK_NEGATIVE_DURATION"


def test_progress_history_is_persisted(services, project):
    ts = services["task_service"]
    task = ts.create_task(project.id, "Design", duration_days=2)

    ts.record_progress(task.id, 0.3, datetime(2024, 1, 2, 12, 0))
    ts.record_progress(task.id, 0.7, datetime(2024, 1, 3, 12, 0))

    stored = services["task_repo"].get(task.id)
    assert stored.percent_complete == 0.7
    assert [(e.recorded_at, e.percent_complete) for e in stored.percent_complete_history] == [
        (datetime(2024, 1, 2, 12, 0), 0.3),
        (datetime(2024, 1, 3, 12, 0), 0.7),
    ]
    # first non-zero progress marks the actual start
    assert stored.actual_start == date(2024, 1, 2)


def test_rejected_progress_leaves_store_untouched(services, project):
    ts = services["task_service"]
    task = ts.create_task(project.id, "Design", duration_days=2)
    ts.record_progress(task.id, 0.5, datetime(2024, 1, 2))

    with pytest.raises(ValidationError):
        ts.record_progress(task.id, 0.2, datetime(2024, 1, 3))

    stored = services["task_repo"].get(task.id)
    assert stored.percent_complete == 0.5
    assert len(stored.percent_complete_history) == 1


def test_progress_on_unknown_task(services):
    with pytest.raises(NotFoundError):
        services["task_service"].record_progress("missing", 0.5)
