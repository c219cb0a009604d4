from core.domain import (
    CalendarException,
    CalendarExceptionType,
    DependencyType,
    FindingKind,
    HealthStatus,
    Holiday,
    Milestone,
    ProgressEntry,
    Project,
    ProjectSnapshot,
    Resource,
    ResourceAssignment,
    ResourceKind,
    ScheduleFinding,
    Task,
    TaskDependency,
    TaskKind,
    WorkingCalendar,
    generate_id,
)

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
