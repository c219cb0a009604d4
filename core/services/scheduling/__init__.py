from .cancellation import CancelToken
from .config import SchedulingConfig
from .durations import resolve_task_duration_hours, resolve_task_effort_hours
from .engine import SchedulingEngine
from .graph import DependencyGraph, build_dependency_graph
from .leveling import ResourceAllocator
from .leveling_models import (
    ResourceAllocationReport,
    ResourceConflict,
    ResourceConflictEntry,
    ResourceLoadSummary,
)
from .models import CPMTaskInfo, ScheduleResult
from .results import apply_schedule_to_milestones, apply_schedule_to_tasks

__all__ = [
    "SchedulingEngine",
    "SchedulingConfig",
    "CancelToken",
    "CPMTaskInfo",
    "ScheduleResult",
    "DependencyGraph",
    "build_dependency_graph",
    "resolve_task_duration_hours",
    "resolve_task_effort_hours",
    "ResourceAllocator",
    "ResourceAllocationReport",
    "ResourceConflict",
    "ResourceConflictEntry",
    "ResourceLoadSummary",
    "apply_schedule_to_tasks",
    "apply_schedule_to_milestones",
]
