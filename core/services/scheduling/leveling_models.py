from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from core.domain.findings import ScheduleFinding


@dataclass(frozen=True)
class ResourceConflictEntry:
    task_id: str
    task_name: str
    hours: float


@dataclass(frozen=True)
class ResourceConflict:
    resource_id: str
    resource_name: str
    conflict_date: date
    total_hours: float
    capacity_hours: float
    entries: tuple[ResourceConflictEntry, ...]

    @property
    def overallocated_hours(self) -> float:
        return self.total_hours - self.capacity_hours


@dataclass(frozen=True)
class ResourceLoadSummary:
    resource_id: str
    resource_name: str
    total_hours: float
    peak_daily_hours: float
    capacity_hours_per_day: float
    overallocated_days: int


@dataclass(frozen=True)
class ResourceAllocationReport:
    conflicts: tuple[ResourceConflict, ...] = ()
    loads: tuple[ResourceLoadSummary, ...] = ()
    findings: tuple[ScheduleFinding, ...] = field(default_factory=tuple)


__all__ = [
    "ResourceConflictEntry",
    "ResourceConflict",
    "ResourceLoadSummary",
    "ResourceAllocationReport",
]
