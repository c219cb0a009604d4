from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Optional, Tuple

from core.domain.enums import DependencyType, TaskKind
from core.domain.identifiers import generate_id
from core.exceptions import ValidationError


@dataclass(frozen=True)
class TaskDependency:
    predecessor_id: str
    dependency_type: DependencyType = DependencyType.FINISH_TO_START
    lag_days: float = 0.0  # negative for lead time


@dataclass(frozen=True)
class ResourceAssignment:
    resource_id: str
    allocated_hours: float = 0.0
    allocation_percent: float = 100.0


@dataclass(frozen=True)
class ProgressEntry:
    recorded_at: datetime
    percent_complete: float


@dataclass(frozen=True)
class Task:
    id: str
    name: str
    project_id: str = ""
    description: str = ""
    kind: TaskKind = TaskKind.FIXED_DURATION
    scheduled_start: Optional[date] = None
    deadline: Optional[date] = None
    duration_days: Optional[float] = None
    estimated_effort_hours: Optional[float] = None
    work_units: Optional[float] = None
    priority: int = 50
    percent_complete: float = 0.0
    percent_complete_history: Tuple[ProgressEntry, ...] = ()
    actual_start: Optional[date] = None
    actual_end: Optional[date] = None
    assignments: Tuple[ResourceAssignment, ...] = ()
    dependencies: Tuple[TaskDependency, ...] = ()
    calculated_cost: Optional[float] = None
    actual_cost: Optional[float] = None
    # written back from a ScheduleResult, never read by the engine
    is_critical_path: bool = False
    slack_hours: Optional[float] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "assignments", tuple(self.assignments))
        object.__setattr__(self, "dependencies", tuple(self.dependencies))
        object.__setattr__(self, "percent_complete_history", tuple(self.percent_complete_history))

    def validate(self) -> None:
        if not (self.name or "").strip():
            raise ValidationError("Task name cannot be empty.", code="TASK_NAME_REQUIRED")
        if self.scheduled_start and self.deadline and self.deadline < self.scheduled_start:
            raise ValidationError(
                f"Task '{self.name}': deadline cannot be before scheduled start.",
                code="TASK_DEADLINE_BEFORE_START",
            )
        if not 0.0 <= self.percent_complete <= 1.0:
            raise ValidationError(
                f"Task '{self.name}': percent complete must be between 0.0 and 1.0.",
                code="TASK_PERCENT_RANGE",
            )
        if self.duration_days is not None and self.duration_days < 0:
            raise ValidationError(
                f"Task '{self.name}': duration cannot be negative.",
                code="TASK_NEGATIVE_DURATION",
            )
        previous = None
        for entry in self.percent_complete_history:
            if previous is not None and entry.percent_complete < previous:
                raise ValidationError(
                    f"Task '{self.name}': progress history must not decrease.",
                    code="TASK_PROGRESS_DECREASED",
                )
            previous = entry.percent_complete

    def record_progress(self, percent_complete: float, recorded_at: datetime) -> "Task":
        """
        Return a copy with `percent_complete` updated and the change appended
        to the progress history. Progress never goes backwards.
        """
        if not 0.0 <= percent_complete <= 1.0:
            raise ValidationError(
                "Percent complete must be between 0.0 and 1.0.",
                code="TASK_PERCENT_RANGE",
            )
        if percent_complete < self.percent_complete:
            raise ValidationError(
                f"Task '{self.name}': progress cannot decrease "
                f"({self.percent_complete:.0%} -> {percent_complete:.0%}).",
                code="TASK_PROGRESS_DECREASED",
            )
        history = self.percent_complete_history
        if history and recorded_at < history[-1].recorded_at:
            raise ValidationError(
                "Progress entries must be recorded in chronological order.",
                code="TASK_PROGRESS_OUT_OF_ORDER",
            )
        entry = ProgressEntry(recorded_at=recorded_at, percent_complete=percent_complete)
        return replace(
            self,
            percent_complete=percent_complete,
            percent_complete_history=history + (entry,),
        )

    @staticmethod
    def create(name: str, project_id: str = "", description: str = "", **extra) -> "Task":
        task = Task(
            id=generate_id(),
            project_id=project_id,
            name=name,
            description=description,
            **extra,
        )
        task.validate()
        return task


__all__ = ["Task", "TaskDependency", "ResourceAssignment", "ProgressEntry"]
