# infra/db/mappers.py
from __future__ import annotations
from typing import Iterable

from core.models import (
    CalendarException,
    Holiday,
    Milestone,
    ProgressEntry,
    Project,
    Resource,
    ResourceAssignment,
    Task,
    TaskDependency,
    WorkingCalendar,
    generate_id,
)
from infra.db.models import (
    CalendarExceptionORM,
    HolidayORM,
    MilestoneORM,
    ProgressEntryORM,
    ProjectORM,
    ResourceORM,
    TaskAssignmentORM,
    TaskDependencyORM,
    TaskORM,
    WorkingCalendarORM,
)


def project_to_orm(project: Project) -> ProjectORM:
    return ProjectORM(
        id=project.id,
        name=project.name,
        description=project.description,
        start_date=project.start_date,
        currency=project.currency,
    )


def project_from_orm(obj: ProjectORM) -> Project:
    return Project(
        id=obj.id,
        name=obj.name,
        description=obj.description or "",
        start_date=obj.start_date,
        currency=obj.currency,
    )


def task_to_orm(task: Task, position: int = 0) -> TaskORM:
    return TaskORM(
        id=task.id,
        project_id=task.project_id,
        position=position,
        name=task.name,
        description=task.description,
        kind=task.kind,
        scheduled_start=task.scheduled_start,
        deadline=task.deadline,
        duration_days=task.duration_days,
        estimated_effort_hours=task.estimated_effort_hours,
        work_units=task.work_units,
        priority=task.priority,
        percent_complete=task.percent_complete,
        actual_start=task.actual_start,
        actual_end=task.actual_end,
        calculated_cost=task.calculated_cost,
        actual_cost=task.actual_cost,
        is_critical_path=task.is_critical_path,
        slack_hours=task.slack_hours,
    )


def task_from_orm(
    obj: TaskORM,
    dependencies: Iterable[TaskDependencyORM] = (),
    assignments: Iterable[TaskAssignmentORM] = (),
    history: Iterable[ProgressEntryORM] = (),
) -> Task:
    return Task(
        id=obj.id,
        project_id=obj.project_id,
        name=obj.name,
        description=obj.description or "",
        kind=obj.kind,
        scheduled_start=obj.scheduled_start,
        deadline=obj.deadline,
        duration_days=obj.duration_days,
        estimated_effort_hours=obj.estimated_effort_hours,
        work_units=obj.work_units,
        priority=obj.priority if obj.priority is not None else 50,
        percent_complete=obj.percent_complete or 0.0,
        percent_complete_history=tuple(progress_from_orm(h) for h in history),
        actual_start=obj.actual_start,
        actual_end=obj.actual_end,
        assignments=tuple(assignment_from_orm(a) for a in assignments),
        dependencies=tuple(dependency_from_orm(d) for d in dependencies),
        calculated_cost=obj.calculated_cost,
        actual_cost=obj.actual_cost,
        is_critical_path=bool(obj.is_critical_path),
        slack_hours=obj.slack_hours,
    )


def milestone_to_orm(milestone: Milestone, position: int = 0) -> MilestoneORM:
    return MilestoneORM(
        id=milestone.id,
        project_id=milestone.project_id,
        position=position,
        name=milestone.name,
        description=milestone.description,
        target_date=milestone.target_date,
        is_critical_path=milestone.is_critical_path,
    )


def milestone_from_orm(obj: MilestoneORM, dependencies: Iterable[TaskDependencyORM] = ()) -> Milestone:
    return Milestone(
        id=obj.id,
        project_id=obj.project_id,
        name=obj.name,
        description=obj.description or "",
        target_date=obj.target_date,
        dependencies=tuple(dependency_from_orm(d) for d in dependencies),
        is_critical_path=bool(obj.is_critical_path),
    )


def dependency_to_orm(project_id: str, successor_id: str, dependency: TaskDependency) -> TaskDependencyORM:
    return TaskDependencyORM(
        project_id=project_id,
        successor_id=successor_id,
        predecessor_id=dependency.predecessor_id,
        dependency_type=dependency.dependency_type,
        lag_days=dependency.lag_days,
    )


def dependency_from_orm(obj: TaskDependencyORM) -> TaskDependency:
    return TaskDependency(
        predecessor_id=obj.predecessor_id,
        dependency_type=obj.dependency_type,
        lag_days=obj.lag_days or 0.0,
    )


def assignment_to_orm(task_id: str, assignment: ResourceAssignment) -> TaskAssignmentORM:
    return TaskAssignmentORM(
        task_id=task_id,
        resource_id=assignment.resource_id,
        allocated_hours=assignment.allocated_hours,
        allocation_percent=assignment.allocation_percent,
    )


def assignment_from_orm(obj: TaskAssignmentORM) -> ResourceAssignment:
    return ResourceAssignment(
        resource_id=obj.resource_id,
        allocated_hours=obj.allocated_hours or 0.0,
        allocation_percent=obj.allocation_percent if obj.allocation_percent is not None else 100.0,
    )


def progress_to_orm(task_id: str, entry: ProgressEntry) -> ProgressEntryORM:
    return ProgressEntryORM(
        task_id=task_id,
        recorded_at=entry.recorded_at,
        percent_complete=entry.percent_complete,
    )


def progress_from_orm(obj: ProgressEntryORM) -> ProgressEntry:
    return ProgressEntry(recorded_at=obj.recorded_at, percent_complete=obj.percent_complete)


def resource_to_orm(resource: Resource) -> ResourceORM:
    return ResourceORM(
        id=resource.id,
        name=resource.name,
        kind=resource.kind,
        bill_rate=resource.bill_rate,
        flat_cost=resource.flat_cost,
        calendar_id=resource.calendar_id,
        availability_percent=resource.availability_percent,
    )


def resource_from_orm(obj: ResourceORM) -> Resource:
    return Resource(
        id=obj.id,
        name=obj.name,
        kind=obj.kind,
        bill_rate=obj.bill_rate or 0.0,
        flat_cost=obj.flat_cost or 0.0,
        calendar_id=obj.calendar_id,
        availability_percent=obj.availability_percent if obj.availability_percent is not None else 100.0,
    )


def calendar_to_orm(calendar: WorkingCalendar) -> WorkingCalendarORM:
    return WorkingCalendarORM(
        id=calendar.id,
        name=calendar.name,
        working_days=",".join(str(d) for d in sorted(calendar.working_days)),
        hours_per_day=calendar.hours_per_day,
        day_start=calendar.day_start,
    )


def holiday_to_orm(calendar_id: str, holiday: Holiday) -> HolidayORM:
    return HolidayORM(
        id=generate_id(),
        calendar_id=calendar_id,
        date=holiday.date,
        name=holiday.name,
        recurring=holiday.recurring,
    )


def calendar_exception_to_orm(calendar_id: str, exc: CalendarException) -> CalendarExceptionORM:
    return CalendarExceptionORM(
        id=generate_id(),
        calendar_id=calendar_id,
        date=exc.date,
        exception_type=exc.exception_type,
        description=exc.description,
    )


def calendar_from_orm(
    obj: WorkingCalendarORM,
    holidays: Iterable[HolidayORM] = (),
    exceptions: Iterable[CalendarExceptionORM] = (),
) -> WorkingCalendar:
    days = frozenset(int(part) for part in (obj.working_days or "").split(",") if part.strip())
    return WorkingCalendar(
        id=obj.id,
        name=obj.name,
        working_days=days,
        hours_per_day=obj.hours_per_day,
        day_start=obj.day_start,
        holidays=tuple(
            Holiday(date=h.date, name=h.name or "", recurring=bool(h.recurring)) for h in holidays
        ),
        exceptions=tuple(
            CalendarException(date=e.date, exception_type=e.exception_type, description=e.description or "")
            for e in exceptions
        ),
    )
