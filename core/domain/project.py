from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional, Tuple

from core.domain.calendar import WorkingCalendar
from core.domain.identifiers import generate_id
from core.domain.milestone import Milestone
from core.domain.resource import Resource
from core.domain.task import Task


@dataclass(frozen=True)
class Project:
    id: str
    name: str
    description: str = ""
    start_date: Optional[date] = None
    currency: Optional[str] = None

    @staticmethod
    def create(name: str, description: str = "", **extra) -> "Project":
        return Project(
            id=generate_id(),
            name=name,
            description=description,
            **extra,
        )


@dataclass(frozen=True)
class ProjectSnapshot:
    """
    Read-only view of everything one scheduling run needs.

    Tasks and milestones keep the caller's ordering; it is used as the final
    tie-break wherever the engine has to pick between equal candidates.
    """

    project_start: date
    tasks: Tuple[Task, ...] = ()
    milestones: Tuple[Milestone, ...] = ()
    resources: Tuple[Resource, ...] = ()
    calendars: Tuple[WorkingCalendar, ...] = ()
    project_id: str = ""
    report_date: Optional[date] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "tasks", tuple(self.tasks))
        object.__setattr__(self, "milestones", tuple(self.milestones))
        object.__setattr__(self, "resources", tuple(self.resources))
        object.__setattr__(self, "calendars", tuple(self.calendars))


__all__ = ["Project", "ProjectSnapshot"]
