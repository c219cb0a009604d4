from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional, Tuple

from core.domain.identifiers import generate_id
from core.domain.task import TaskDependency


@dataclass(frozen=True)
class Milestone:
    id: str
    name: str
    project_id: str = ""
    description: str = ""
    target_date: Optional[date] = None
    dependencies: Tuple[TaskDependency, ...] = ()
    is_critical_path: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "dependencies", tuple(self.dependencies))

    @staticmethod
    def create(name: str, target_date: Optional[date] = None, project_id: str = "", **extra) -> "Milestone":
        return Milestone(
            id=generate_id(),
            name=name,
            project_id=project_id,
            target_date=target_date,
            **extra,
        )


__all__ = ["Milestone"]
