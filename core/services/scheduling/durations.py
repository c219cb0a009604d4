from __future__ import annotations

from datetime import timedelta
from typing import Optional

from core.domain.enums import TaskKind
from core.domain.task import Task
from core.services.work_calendar.engine import WorkCalendarEngine, hours_to_minutes
from core.services.work_calendar.resolver import CalendarResolver


def resolve_task_effort_hours(task: Task) -> float:
    """Estimated effort if stated, otherwise the hours booked on the assignments."""
    if task.estimated_effort_hours is not None:
        return max(0.0, float(task.estimated_effort_hours))
    return sum(max(0.0, float(a.allocated_hours or 0.0)) for a in task.assignments)


def resolve_daily_capacity_hours(task: Task, resolver: Optional[CalendarResolver]) -> float:
    """Working hours per day the assigned resources put into the task together."""
    if resolver is None:
        return 0.0
    capacity = 0.0
    for assignment in task.assignments:
        resource = resolver.resource(assignment.resource_id)
        if resource is None:
            continue
        hours_per_day = resolver.for_resource(resource.id).hours_per_day
        capacity += (
            hours_per_day
            * float(assignment.allocation_percent or 0.0) / 100.0
            * float(resource.availability_percent or 0.0) / 100.0
        )
    return capacity


def resolve_task_duration_hours(
    task: Task,
    calendar: WorkCalendarEngine,
    resolver: Optional[CalendarResolver] = None,
    buffer_percent: float = 0.0,
) -> float:
    """
    Working hours the task occupies on its own calendar.

    - FIXED_DURATION: the stated number of days, else the span from scheduled
      start through deadline, else one day.
    - EFFORT_DRIVEN: effort divided by the daily capacity of the assigned
      resources; without resources the default working day is used.
    - FIXED_WORK: work stays constant and is split across the assigned resources.

    Effort and work driven tasks without any effort fall back to the fixed
    duration rules. The result is rounded to whole minutes.
    """
    if task.kind == TaskKind.EFFORT_DRIVEN:
        hours = _effort_driven_hours(task, calendar, resolver)
    elif task.kind == TaskKind.FIXED_WORK:
        hours = _fixed_work_hours(task, calendar, resolver)
    else:
        hours = None
    if hours is None:
        hours = _fixed_duration_hours(task, calendar)

    if hours > 0 and buffer_percent:
        hours *= 1.0 + float(buffer_percent) / 100.0
    return hours_to_minutes(max(0.0, hours)) / 60.0


def _fixed_duration_hours(task: Task, calendar: WorkCalendarEngine) -> float:
    if task.duration_days is not None:
        return float(task.duration_days) * calendar.hours_per_day
    if task.scheduled_start and task.deadline:
        # through the end of the deadline day
        return calendar.working_hours_between(
            task.scheduled_start,
            calendar.to_instant(task.deadline + timedelta(days=1)),
        )
    return calendar.hours_per_day


def _effort_driven_hours(
    task: Task,
    calendar: WorkCalendarEngine,
    resolver: Optional[CalendarResolver],
) -> Optional[float]:
    effort = resolve_task_effort_hours(task)
    if effort <= 0:
        return None
    capacity = resolve_daily_capacity_hours(task, resolver)
    if capacity <= 0:
        default_hours = resolver.default.hours_per_day if resolver else calendar.hours_per_day
        days = effort / default_hours
    else:
        days = effort / capacity
    return days * calendar.hours_per_day


def _fixed_work_hours(
    task: Task,
    calendar: WorkCalendarEngine,
    resolver: Optional[CalendarResolver],
) -> Optional[float]:
    work = float(task.work_units) if task.work_units is not None else resolve_task_effort_hours(task)
    if work <= 0:
        return None
    if resolver is None:
        count = 0
    else:
        count = sum(1 for a in task.assignments if resolver.resource(a.resource_id) is not None)
    days = work / (max(1, count) * calendar.hours_per_day)
    return days * calendar.hours_per_day


__all__ = [
    "resolve_task_effort_hours",
    "resolve_daily_capacity_hours",
    "resolve_task_duration_hours",
]
