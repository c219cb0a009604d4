from datetime import date

import pytest

from core.models import Resource, ResourceAssignment, Task, TaskKind, WorkingCalendar
from core.services.scheduling import resolve_task_duration_hours, resolve_task_effort_hours
from core.services.scheduling.durations import resolve_daily_capacity_hours
from core.services.work_calendar import CalendarResolver, WorkCalendarEngine


@pytest.fixture
def calendar(default_calendar):
    return WorkCalendarEngine(default_calendar)


def _resolver(*resources, calendars=()):
    return CalendarResolver(WorkingCalendar.create_default(), calendars, resources)


def test_fixed_duration_from_days(calendar):
    task = Task(id="t", name="T", duration_days=2)
    assert resolve_task_duration_hours(task, calendar) == 16


def test_fixed_duration_from_start_and_deadline(calendar):
    task = Task(id="t", name="T", scheduled_start=date(2024, 1, 1), deadline=date(2024, 1, 3))
    # Monday through Wednesday inclusive
    assert resolve_task_duration_hours(task, calendar) == 24


def test_fixed_duration_defaults_to_one_day(calendar):
    assert resolve_task_duration_hours(Task(id="t", name="T"), calendar) == 8


def test_buffer_is_applied_and_rounded_to_minutes(calendar):
    task = Task(id="t", name="T", duration_days=2)
    assert resolve_task_duration_hours(task, calendar, buffer_percent=10) == pytest.approx(17.6)

    odd = Task(id="o", name="O", duration_days=0.1)  # 48 minutes
    assert resolve_task_duration_hours(odd, calendar, buffer_percent=1) == pytest.approx(48 / 60)


def test_effort_driven_uses_resource_capacity(calendar):
    half = Resource(id="r1", name="Half", availability_percent=50.0)
    full = Resource(id="r2", name="Full")
    resolver = _resolver(half, full)

    solo = Task(
        id="t1",
        name="Solo",
        kind=TaskKind.EFFORT_DRIVEN,
        estimated_effort_hours=32,
        assignments=(ResourceAssignment("r1"),),
    )
    assert resolve_daily_capacity_hours(solo, resolver) == 4
    # 32h of effort at 4h/day -> 8 days
    assert resolve_task_duration_hours(solo, calendar, resolver) == 64

    pair = Task(
        id="t2",
        name="Pair",
        kind=TaskKind.EFFORT_DRIVEN,
        estimated_effort_hours=32,
        assignments=(ResourceAssignment("r2"), ResourceAssignment("r2", allocation_percent=100.0)),
    )
    assert resolve_task_duration_hours(pair, calendar, resolver) == 16


def test_effort_driven_without_resources_uses_default_day(calendar):
    task = Task(id="t", name="T", kind=TaskKind.EFFORT_DRIVEN, estimated_effort_hours=12)
    assert resolve_task_duration_hours(task, calendar, _resolver()) == 12


def test_effort_falls_back_to_booked_hours():
    task = Task(
        id="t",
        name="T",
        kind=TaskKind.EFFORT_DRIVEN,
        assignments=(ResourceAssignment("r1", allocated_hours=6), ResourceAssignment("r2", allocated_hours=4)),
    )
    assert resolve_task_effort_hours(task) == 10


def test_effort_driven_without_effort_uses_fixed_rules(calendar):
    task = Task(id="t", name="T", kind=TaskKind.EFFORT_DRIVEN, duration_days=3)
    assert resolve_task_duration_hours(task, calendar, _resolver()) == 24


def test_fixed_work_is_split_across_resources(calendar):
    resolver = _resolver(Resource(id="r1", name="A"), Resource(id="r2", name="B"))
    task = Task(
        id="t",
        name="T",
        kind=TaskKind.FIXED_WORK,
        work_units=32,
        assignments=(ResourceAssignment("r1"), ResourceAssignment("r2")),
    )
    assert resolve_task_duration_hours(task, calendar, resolver) == 16

    unassigned = Task(id="u", name="U", kind=TaskKind.FIXED_WORK, work_units=32)
    assert resolve_task_duration_hours(unassigned, calendar, resolver) == 32


def test_duration_follows_calendar_hours_per_day():
    short_days = WorkCalendarEngine(WorkingCalendar(id="short", hours_per_day=6.0))
    task = Task(id="t", name="T", duration_days=2)
    assert resolve_task_duration_hours(task, short_days) == 12
