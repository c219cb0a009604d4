# infra/db/repositories.py
from __future__ import annotations
from collections import defaultdict
from datetime import date
from typing import Dict, List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from core.exceptions import NotFoundError
from core.interfaces import (
    MilestoneRepository,
    ProjectRepository,
    ProjectSnapshotReader,
    ResourceRepository,
    TaskRepository,
    WorkingCalendarRepository,
)
from core.models import Milestone, Project, ProjectSnapshot, Resource, Task, WorkingCalendar
from infra.db.mappers import (
    assignment_to_orm,
    calendar_exception_to_orm,
    calendar_from_orm,
    calendar_to_orm,
    dependency_to_orm,
    holiday_to_orm,
    milestone_from_orm,
    milestone_to_orm,
    progress_to_orm,
    project_from_orm,
    project_to_orm,
    resource_from_orm,
    resource_to_orm,
    task_from_orm,
    task_to_orm,
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


class SqlAlchemyProjectRepository(ProjectRepository):
    def __init__(self, session: Session):
        self.session = session

    def add(self, project: Project) -> None:
        self.session.add(project_to_orm(project))

    def update(self, project: Project) -> None:
        self.session.merge(project_to_orm(project))

    def get(self, project_id: str) -> Optional[Project]:
        obj = self.session.get(ProjectORM, project_id)
        return project_from_orm(obj) if obj else None

    def list_all(self) -> List[Project]:
        rows = self.session.execute(select(ProjectORM).order_by(ProjectORM.name)).scalars().all()
        return [project_from_orm(r) for r in rows]


class SqlAlchemyTaskRepository(TaskRepository):
    def __init__(self, session: Session):
        self.session = session

    def add(self, task: Task) -> None:
        position = self.session.execute(
            select(func.count()).select_from(TaskORM).where(TaskORM.project_id == task.project_id)
        ).scalar_one()
        self.session.add(task_to_orm(task, position=position))
        self.session.flush()
        self._write_children(task)

    def update(self, task: Task) -> None:
        existing = self.session.get(TaskORM, task.id)
        position = existing.position if existing is not None else 0
        self.session.merge(task_to_orm(task, position=position))
        self._clear_children(task.id)
        self.session.flush()
        self._write_children(task)

    def update_schedule_fields(self, task: Task) -> None:
        obj = self.session.get(TaskORM, task.id)
        if obj is None:
            raise NotFoundError(f"Task '{task.id}' not found.", code="TASK_NOT_FOUND")
        obj.is_critical_path = task.is_critical_path
        obj.slack_hours = task.slack_hours

    def delete(self, task_id: str) -> None:
        self._clear_children(task_id)
        # successors must not be left pointing at a removed task
        self.session.execute(delete(TaskDependencyORM).where(TaskDependencyORM.predecessor_id == task_id))
        self.session.execute(delete(TaskORM).where(TaskORM.id == task_id))

    def get(self, task_id: str) -> Optional[Task]:
        obj = self.session.get(TaskORM, task_id)
        if obj is None:
            return None
        return self._hydrate([obj])[0]

    def list_by_project(self, project_id: str) -> List[Task]:
        stmt = (
            select(TaskORM)
            .where(TaskORM.project_id == project_id)
            .order_by(TaskORM.position, TaskORM.id)
        )
        rows = self.session.execute(stmt).scalars().all()
        return self._hydrate(rows)

    def _hydrate(self, rows) -> List[Task]:
        ids = [r.id for r in rows]
        if not ids:
            return []
        deps = _dependencies_by_successor(self.session, ids)
        assignments: Dict[str, list] = defaultdict(list)
        for a in self.session.execute(
            select(TaskAssignmentORM)
            .where(TaskAssignmentORM.task_id.in_(ids))
            .order_by(TaskAssignmentORM.id)
        ).scalars():
            assignments[a.task_id].append(a)
        history: Dict[str, list] = defaultdict(list)
        for h in self.session.execute(
            select(ProgressEntryORM)
            .where(ProgressEntryORM.task_id.in_(ids))
            .order_by(ProgressEntryORM.recorded_at, ProgressEntryORM.id)
        ).scalars():
            history[h.task_id].append(h)
        return [
            task_from_orm(r, deps.get(r.id, []), assignments.get(r.id, []), history.get(r.id, []))
            for r in rows
        ]

    def _write_children(self, task: Task) -> None:
        for dep in task.dependencies:
            self.session.add(dependency_to_orm(task.project_id, task.id, dep))
        for assignment in task.assignments:
            self.session.add(assignment_to_orm(task.id, assignment))
        for entry in task.percent_complete_history:
            self.session.add(progress_to_orm(task.id, entry))

    def _clear_children(self, task_id: str) -> None:
        self.session.execute(delete(TaskDependencyORM).where(TaskDependencyORM.successor_id == task_id))
        self.session.execute(delete(TaskAssignmentORM).where(TaskAssignmentORM.task_id == task_id))
        self.session.execute(delete(ProgressEntryORM).where(ProgressEntryORM.task_id == task_id))


class SqlAlchemyMilestoneRepository(MilestoneRepository):
    def __init__(self, session: Session):
        self.session = session

    def add(self, milestone: Milestone) -> None:
        position = self.session.execute(
            select(func.count()).select_from(MilestoneORM).where(MilestoneORM.project_id == milestone.project_id)
        ).scalar_one()
        self.session.add(milestone_to_orm(milestone, position=position))
        self.session.flush()
        for dep in milestone.dependencies:
            self.session.add(dependency_to_orm(milestone.project_id, milestone.id, dep))

    def update(self, milestone: Milestone) -> None:
        existing = self.session.get(MilestoneORM, milestone.id)
        position = existing.position if existing is not None else 0
        self.session.merge(milestone_to_orm(milestone, position=position))
        self.session.execute(delete(TaskDependencyORM).where(TaskDependencyORM.successor_id == milestone.id))
        for dep in milestone.dependencies:
            self.session.add(dependency_to_orm(milestone.project_id, milestone.id, dep))

    def get(self, milestone_id: str) -> Optional[Milestone]:
        obj = self.session.get(MilestoneORM, milestone_id)
        if obj is None:
            return None
        deps = _dependencies_by_successor(self.session, [obj.id])
        return milestone_from_orm(obj, deps.get(obj.id, []))

    def list_by_project(self, project_id: str) -> List[Milestone]:
        stmt = (
            select(MilestoneORM)
            .where(MilestoneORM.project_id == project_id)
            .order_by(MilestoneORM.position, MilestoneORM.id)
        )
        rows = self.session.execute(stmt).scalars().all()
        deps = _dependencies_by_successor(self.session, [r.id for r in rows])
        return [milestone_from_orm(r, deps.get(r.id, [])) for r in rows]


class SqlAlchemyResourceRepository(ResourceRepository):
    def __init__(self, session: Session):
        self.session = session

    def add(self, resource: Resource) -> None:
        self.session.add(resource_to_orm(resource))

    def update(self, resource: Resource) -> None:
        self.session.merge(resource_to_orm(resource))

    def get(self, resource_id: str) -> Optional[Resource]:
        obj = self.session.get(ResourceORM, resource_id)
        return resource_from_orm(obj) if obj else None

    def list_all(self) -> List[Resource]:
        rows = self.session.execute(select(ResourceORM).order_by(ResourceORM.name, ResourceORM.id)).scalars().all()
        return [resource_from_orm(r) for r in rows]


class SqlAlchemyWorkingCalendarRepository(WorkingCalendarRepository):
    def __init__(self, session: Session):
        self.session = session

    def upsert(self, calendar: WorkingCalendar) -> None:
        self.session.merge(calendar_to_orm(calendar))
        self.session.flush()
        self.session.execute(delete(HolidayORM).where(HolidayORM.calendar_id == calendar.id))
        self.session.execute(delete(CalendarExceptionORM).where(CalendarExceptionORM.calendar_id == calendar.id))
        for holiday in calendar.holidays:
            self.session.add(holiday_to_orm(calendar.id, holiday))
        for exc in calendar.exceptions:
            self.session.add(calendar_exception_to_orm(calendar.id, exc))

    def get(self, calendar_id: str) -> Optional[WorkingCalendar]:
        obj = self.session.get(WorkingCalendarORM, calendar_id)
        if obj is None:
            return None
        return self._hydrate(obj)

    def list_all(self) -> List[WorkingCalendar]:
        rows = self.session.execute(select(WorkingCalendarORM).order_by(WorkingCalendarORM.id)).scalars().all()
        return [self._hydrate(r) for r in rows]

    def _hydrate(self, obj: WorkingCalendarORM) -> WorkingCalendar:
        holidays = self.session.execute(
            select(HolidayORM).where(HolidayORM.calendar_id == obj.id).order_by(HolidayORM.date)
        ).scalars().all()
        exceptions = self.session.execute(
            select(CalendarExceptionORM)
            .where(CalendarExceptionORM.calendar_id == obj.id)
            .order_by(CalendarExceptionORM.date)
        ).scalars().all()
        return calendar_from_orm(obj, holidays, exceptions)


class SqlAlchemySnapshotReader(ProjectSnapshotReader):
    """Builds the read-only ProjectSnapshot a scheduling run works on."""

    def __init__(self, session: Session):
        self.session = session
        self._projects = SqlAlchemyProjectRepository(session)
        self._tasks = SqlAlchemyTaskRepository(session)
        self._milestones = SqlAlchemyMilestoneRepository(session)
        self._resources = SqlAlchemyResourceRepository(session)
        self._calendars = SqlAlchemyWorkingCalendarRepository(session)

    def load(self, project_id: str, report_date: Optional[date] = None) -> ProjectSnapshot:
        project = self._projects.get(project_id)
        if project is None:
            raise NotFoundError(f"Project '{project_id}' not found.", code="PROJECT_NOT_FOUND")
        tasks = self._tasks.list_by_project(project_id)
        milestones = self._milestones.list_by_project(project_id)
        return ProjectSnapshot(
            project_id=project.id,
            project_start=_project_start(project, tasks),
            tasks=tuple(tasks),
            milestones=tuple(milestones),
            resources=tuple(self._resources.list_all()),
            calendars=tuple(self._calendars.list_all()),
            report_date=report_date,
        )


def _project_start(project: Project, tasks: List[Task]) -> date:
    if project.start_date is not None:
        return project.start_date
    starts = [t.scheduled_start for t in tasks if t.scheduled_start is not None]
    return min(starts) if starts else date.today()


def _dependencies_by_successor(session: Session, successor_ids: List[str]) -> Dict[str, list]:
    out: Dict[str, list] = defaultdict(list)
    if not successor_ids:
        return out
    stmt = (
        select(TaskDependencyORM)
        .where(TaskDependencyORM.successor_id.in_(successor_ids))
        .order_by(TaskDependencyORM.id)
    )
    for dep in session.execute(stmt).scalars():
        out[dep.successor_id].append(dep)
    return out


__all__ = [
    "SqlAlchemyProjectRepository",
    "SqlAlchemyTaskRepository",
    "SqlAlchemyMilestoneRepository",
    "SqlAlchemyResourceRepository",
    "SqlAlchemyWorkingCalendarRepository",
    "SqlAlchemySnapshotReader",
]
