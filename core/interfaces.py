from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from typing import List, Optional

from core.domain.calendar import WorkingCalendar
from core.domain.milestone import Milestone
from core.domain.project import Project, ProjectSnapshot
from core.domain.resource import Resource
from core.domain.task import Task


class ProjectRepository(ABC):
    @abstractmethod
    def add(self, project: Project) -> None: ...
    @abstractmethod
    def update(self, project: Project) -> None: ...
    @abstractmethod
    def get(self, project_id: str) -> Optional[Project]: ...
    @abstractmethod
    def list_all(self) -> List[Project]: ...


class TaskRepository(ABC):
    """Tasks are stored together with their dependencies, assignments and progress history."""

    @abstractmethod
    def add(self, task: Task) -> None: ...
    @abstractmethod
    def update(self, task: Task) -> None: ...
    @abstractmethod
    def update_schedule_fields(self, task: Task) -> None: ...
    @abstractmethod
    def delete(self, task_id: str) -> None: ...
    @abstractmethod
    def get(self, task_id: str) -> Optional[Task]: ...
    @abstractmethod
    def list_by_project(self, project_id: str) -> List[Task]: ...


class MilestoneRepository(ABC):
    @abstractmethod
    def add(self, milestone: Milestone) -> None: ...
    @abstractmethod
    def update(self, milestone: Milestone) -> None: ...
    @abstractmethod
    def get(self, milestone_id: str) -> Optional[Milestone]: ...
    @abstractmethod
    def list_by_project(self, project_id: str) -> List[Milestone]: ...


class ResourceRepository(ABC):
    @abstractmethod
    def add(self, resource: Resource) -> None: ...
    @abstractmethod
    def update(self, resource: Resource) -> None: ...
    @abstractmethod
    def get(self, resource_id: str) -> Optional[Resource]: ...
    @abstractmethod
    def list_all(self) -> List[Resource]: ...


class WorkingCalendarRepository(ABC):
    @abstractmethod
    def upsert(self, calendar: WorkingCalendar) -> None: ...
    @abstractmethod
    def get(self, calendar_id: str) -> Optional[WorkingCalendar]: ...
    @abstractmethod
    def list_all(self) -> List[WorkingCalendar]: ...


class ProjectSnapshotReader(ABC):
    @abstractmethod
    def load(self, project_id: str, report_date: Optional[date] = None) -> ProjectSnapshot: ...


__all__ = [
    "ProjectRepository",
    "TaskRepository",
    "MilestoneRepository",
    "ResourceRepository",
    "WorkingCalendarRepository",
    "ProjectSnapshotReader",
]
