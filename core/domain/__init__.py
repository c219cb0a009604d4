from core.domain.calendar import CalendarException, Holiday, WorkingCalendar
from core.domain.enums import (
    CalendarExceptionType,
    DependencyType,
    FindingKind,
    HealthStatus,
    ResourceKind,
    TaskKind,
)
from core.domain.findings import ScheduleFinding
from core.domain.identifiers import generate_id
from core.domain.milestone import Milestone
from core.domain.project import Project, ProjectSnapshot
from core.domain.resource import Resource
from core.domain.task import ProgressEntry, ResourceAssignment, Task, TaskDependency

__all__ = [
    "generate_id",
    "DependencyType",
    "TaskKind",
    "ResourceKind",
    "CalendarExceptionType",
    "FindingKind",
    "HealthStatus",
    "Project",
    "ProjectSnapshot",
    "Task",
    "TaskDependency",
    "ResourceAssignment",
    "ProgressEntry",
    "Milestone",
    "Resource",
    "WorkingCalendar",
    "Holiday",
    "CalendarException",
    "ScheduleFinding",
]
