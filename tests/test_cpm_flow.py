from datetime import date, datetime

import pytest

from core.exceptions import JobCancelledError
from core.models import (
    DependencyType,
    FindingKind,
    Milestone,
    ProjectSnapshot,
    Resource,
    ResourceAssignment,
    Task,
    TaskDependency,
    WorkingCalendar,
)
from core.services.scheduling import CancelToken, SchedulingConfig, SchedulingEngine

START = date(2024, 1, 1)  # Monday


def _task(task_id, days, *deps, **extra):
    return Task(
        id=task_id,
        name=f"Task {task_id}",
        duration_days=days,
        dependencies=tuple(deps),
        **extra,
    )


def _fs(pred, lag=0.0):
    return TaskDependency(pred, DependencyType.FINISH_TO_START, lag)


def _snapshot(tasks, milestones=(), **extra):
    return ProjectSnapshot(project_start=START, tasks=tasks, milestones=milestones, **extra)


def test_cpm_forward_backward_basic(engine):
    a = _task("A", 3)
    b = _task("B", 2, _fs("A"))
    c = _task("C", 1)

    result = engine.compute(_snapshot([a, b, c]))
    infoA, infoB, infoC = result.nodes["A"], result.nodes["B"], result.nodes["C"]

    assert infoA.earliest_start == datetime(2024, 1, 1, 9, 0)
    assert infoA.earliest_finish == datetime(2024, 1, 3, 17, 0)
    # B starts the next working morning after A finishes (FS, lag 0)
    assert infoB.earliest_start == datetime(2024, 1, 4, 9, 0)
    assert infoB.earliest_finish == datetime(2024, 1, 5, 17, 0)

    assert result.project_finish == datetime(2024, 1, 5, 17, 0)
    assert result.project_duration_hours == 40
    assert result.project_duration_days == 5

    assert infoA.total_float_hours == 0
    assert infoB.total_float_hours == 0
    assert infoC.total_float_hours == 32
    assert infoC.latest_start == datetime(2024, 1, 5, 9, 0)
    assert infoC.free_float_hours == 32
    assert infoA.free_float_hours == 0

    assert result.critical_path == ("A", "B")
    assert result.is_critical("A") and not result.is_critical("C")
    assert result.slack == {"A": 0, "B": 0, "C": 32}
    assert result.findings == ()


def test_start_to_start_with_lag(engine):
    a = _task("A", 3)
    b = _task("B", 2, TaskDependency("A", DependencyType.START_TO_START, 1))

    result = engine.compute(_snapshot([a, b]))

    assert result.nodes["B"].earliest_start == datetime(2024, 1, 2, 9, 0)
    assert result.nodes["B"].earliest_finish == datetime(2024, 1, 3, 17, 0)
    assert result.critical_path == ("A", "B")


def test_finish_to_finish_aligns_finishes(engine):
    a = _task("A", 3)
    b = _task("B", 1, TaskDependency("A", DependencyType.FINISH_TO_FINISH))

    result = engine.compute(_snapshot([a, b]))

    assert result.nodes["B"].earliest_start == datetime(2024, 1, 3, 9, 0)
    assert result.nodes["B"].earliest_finish == result.nodes["A"].earliest_finish


def test_start_to_finish_never_starts_before_project(engine):
    a = _task("A", 2)
    b = _task("B", 1, TaskDependency("A", DependencyType.START_TO_FINISH))

    result = engine.compute(_snapshot([a, b]))
    infoB = result.nodes["B"]

    assert infoB.earliest_start == datetime(2024, 1, 1, 9, 0)
    assert infoB.earliest_finish >= result.nodes["A"].earliest_start


def test_negative_lag_is_lead_time(engine):
    a = _task("A", 3)
    b = _task("B", 2, _fs("A", lag=-1))

    result = engine.compute(_snapshot([a, b]))

    assert result.nodes["B"].earliest_start == datetime(2024, 1, 3, 9, 0)
    assert result.nodes["B"].earliest_finish == datetime(2024, 1, 4, 17, 0)


def test_scheduled_start_is_a_lower_bound(engine):
    a = _task("A", 1, scheduled_start=date(2024, 1, 6))  # Saturday

    result = engine.compute(_snapshot([a]))

    assert result.nodes["A"].earliest_start == datetime(2024, 1, 8, 9, 0)
    assert result.nodes["A"].earliest_finish == datetime(2024, 1, 8, 17, 0)


def test_milestone_is_zero_duration_and_can_be_critical(engine):
    a = _task("A", 3)
    b = _task("B", 2, _fs("A"))
    gate = Milestone(id="M", name="Go-live", target_date=date(2024, 1, 5), dependencies=(_fs("B"),))

    result = engine.compute(_snapshot([a, b], [gate]))
    info = result.nodes["M"]

    assert info.is_milestone
    assert info.duration_hours == 0
    assert info.earliest_start == info.earliest_finish == datetime(2024, 1, 5, 17, 0)
    assert result.critical_path == ("A", "B", "M")
    assert not [f for f in result.findings if f.kind == FindingKind.DEADLINE_MISSED]


def test_missed_deadline_is_a_finding_not_a_constraint(engine):
    a = _task("A", 3)
    b = _task("B", 2, _fs("A"))
    gate = Milestone(id="M", name="Go-live", target_date=date(2024, 1, 4), dependencies=(_fs("B"),))

    result = engine.compute(_snapshot([a, b], [gate]))

    missed = [f for f in result.findings if f.kind == FindingKind.DEADLINE_MISSED]
    assert len(missed) == 1
    assert missed[0].node_id == "M"
    assert missed[0].hours == 8
    assert result.nodes["M"].late_by_hours == 8
    assert result.project_finish == datetime(2024, 1, 5, 17, 0)


def test_actual_dates_pin_the_task(engine):
    a = _task("A", 3, actual_start=date(2024, 1, 1), actual_end=date(2024, 1, 2))
    b = _task("B", 2, _fs("A"))

    result = engine.compute(_snapshot([a, b]))

    assert result.nodes["A"].earliest_start == datetime(2024, 1, 1, 9, 0)
    assert result.nodes["A"].earliest_finish == datetime(2024, 1, 2, 17, 0)
    assert result.nodes["B"].earliest_start == datetime(2024, 1, 3, 9, 0)
    assert result.nodes["B"].earliest_finish == datetime(2024, 1, 4, 17, 0)


def test_conflicting_actuals_produce_negative_float_finding(engine):
    a = _task("A", 1)
    b = _task("B", 1, _fs("A"), actual_end=date(2024, 1, 1))

    result = engine.compute(_snapshot([a, b]))

    negative = [f for f in result.findings if f.kind == FindingKind.NEGATIVE_FLOAT]
    assert [f.node_id for f in negative] == ["A"]
    assert negative[0].hours == -8
    assert result.nodes["A"].total_float_hours == 0
    assert result.nodes["A"].is_critical


def test_empty_snapshot(engine):
    result = engine.compute(_snapshot([]))

    assert result.nodes == {}
    assert result.critical_path == ()
    assert result.project_start == result.project_finish == datetime(2024, 1, 1, 9, 0)
    assert result.project_duration_hours == 0


def test_compute_is_deterministic(engine):
    tasks = [
        _task("A", 2),
        _task("B", 1.5, _fs("A")),
        _task("C", 3, TaskDependency("A", DependencyType.START_TO_START, 0.5)),
        _task("D", 1, _fs("B"), _fs("C")),
    ]
    snapshot = _snapshot(tasks)

    first = engine.compute(snapshot)
    second = engine.compute(snapshot)

    assert first == second
    assert SchedulingEngine(engine.config).compute(snapshot) == first


def test_every_node_respects_its_dependencies(engine):
    tasks = [
        _task("A", 2),
        _task("B", 1.5, _fs("A", lag=0.5)),
        _task("C", 3, TaskDependency("A", DependencyType.START_TO_START, 1)),
        _task("D", 1, _fs("B"), TaskDependency("C", DependencyType.FINISH_TO_FINISH)),
    ]
    result = engine.compute(_snapshot(tasks))
    n = result.nodes

    for info in n.values():
        assert info.earliest_start <= info.latest_start
        assert info.earliest_finish <= info.latest_finish
        assert info.total_float_hours >= 0
        assert 0 <= info.free_float_hours <= info.total_float_hours
    assert n["B"].earliest_start >= n["A"].earliest_finish
    assert n["C"].earliest_start >= n["A"].earliest_start
    assert n["D"].earliest_finish >= n["C"].earliest_finish
    assert result.critical_path
    assert result.project_finish == max(i.earliest_finish for i in n.values())


def test_task_follows_calendar_of_assigned_resource():
    part_time = WorkingCalendar(id="half", name="Half days", hours_per_day=4.0)
    ana = Resource(id="r1", name="Ana", calendar_id="half")
    a = _task("A", 2, assignments=(ResourceAssignment("r1"),))

    result = SchedulingEngine().compute(
        _snapshot([a], resources=(ana,), calendars=(part_time,))
    )

    info = result.nodes["A"]
    assert info.calendar_id == "half"
    assert info.duration_hours == 8
    assert info.earliest_finish == datetime(2024, 1, 2, 13, 0)


def test_task_span_without_working_time_is_reported(engine):
    weekend = _task(
        "W",
        None,
        scheduled_start=date(2024, 1, 6),
        deadline=date(2024, 1, 7),
    )

    result = engine.compute(_snapshot([weekend]))

    kinds = [f.kind for f in result.findings]
    assert FindingKind.NON_WORKING_SPAN in kinds
    assert result.nodes["W"].duration_hours == 0


def test_buffer_percent_lengthens_durations():
    engine = SchedulingEngine(SchedulingConfig(buffer_percent=50))
    result = engine.compute(_snapshot([_task("A", 2)]))

    assert result.nodes["A"].duration_hours == 24
    assert result.nodes["A"].earliest_finish == datetime(2024, 1, 3, 17, 0)


def test_cancelled_run_raises(engine):
    token = CancelToken()
    token.cancel()

    with pytest.raises(JobCancelledError):
        engine.compute(_snapshot([_task("A", 1)]), cancel_token=token)


def test_long_chain_is_scheduled_without_recursion(engine):
    tasks = [_task("T0000", 1)]
    for i in range(1, 1500):
        tasks.append(_task(f"T{i:04d}", 1, _fs(f"T{i - 1:04d}")))

    result = engine.compute(_snapshot(tasks))

    assert len(result.critical_path) == 1500
    assert result.project_duration_days == 1500
    assert result.critical_path[0] == "T0000" and result.critical_path[-1] == "T1499"
