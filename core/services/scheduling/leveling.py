from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date, datetime, timedelta
from typing import Dict, Iterator, Mapping, Sequence

from core.domain.enums import FindingKind
from core.domain.findings import ScheduleFinding
from core.domain.task import ResourceAssignment, Task
from core.services.scheduling.leveling_models import (
    ResourceAllocationReport,
    ResourceConflict,
    ResourceConflictEntry,
    ResourceLoadSummary,
)
from core.services.scheduling.models import CPMTaskInfo
from core.services.work_calendar.engine import WorkCalendarEngine
from core.services.work_calendar.resolver import CalendarResolver

logger = logging.getLogger(__name__)

DailyLoads = Dict[tuple[str, date], list[tuple[Task, float]]]


class ResourceAllocator:
    """
    Spreads every assignment over the working days its task is scheduled on and
    compares the daily sum per resource against that resource's capacity.
    Overallocation is reported; nothing is moved.
    """

    def __init__(self, resolver: CalendarResolver, tolerance_hours: float = 1e-9):
        self._resolver = resolver
        self._tolerance = tolerance_hours

    def allocate(
        self,
        tasks: Sequence[Task],
        nodes: Mapping[str, CPMTaskInfo],
    ) -> ResourceAllocationReport:
        loads, findings = build_daily_loads(tasks, nodes, self._resolver)
        conflicts = build_resource_conflicts(loads, self._resolver, self._tolerance)
        summaries = summarize_resource_loads(loads, conflicts, self._resolver)

        for conflict in conflicts:
            findings.append(
                ScheduleFinding(
                    kind=FindingKind.OVERALLOCATION,
                    message=(
                        f"Resource '{conflict.resource_name}' is booked for "
                        f"{conflict.total_hours:.2f} h on {conflict.conflict_date.isoformat()} "
                        f"(capacity {conflict.capacity_hours:.2f} h)."
                    ),
                    resource_id=conflict.resource_id,
                    day=conflict.conflict_date,
                    hours=conflict.overallocated_hours,
                )
            )
        if conflicts:
            logger.info("Resource allocation found %s overallocated day(s)", len(conflicts))

        return ResourceAllocationReport(
            conflicts=tuple(conflicts),
            loads=tuple(summaries),
            findings=tuple(findings),
        )


def build_daily_loads(
    tasks: Sequence[Task],
    nodes: Mapping[str, CPMTaskInfo],
    resolver: CalendarResolver,
) -> tuple[DailyLoads, list[ScheduleFinding]]:
    bucket: DailyLoads = defaultdict(list)
    findings: list[ScheduleFinding] = []

    for task in tasks:
        info = nodes.get(task.id)
        if info is None or not task.assignments:
            continue
        for assignment in task.assignments:
            resource = resolver.resource(assignment.resource_id)
            if resource is None:
                logger.warning(
                    "Task %s is assigned to unknown resource %s; ignored for allocation",
                    task.id,
                    assignment.resource_id,
                )
                continue
            calendar = resolver.for_resource(resource.id)
            overlaps = list(_working_overlap(calendar, info.earliest_start, info.earliest_finish))
            total_minutes = sum(minutes for _, minutes in overlaps)
            if total_minutes == 0:
                if info.earliest_finish > info.earliest_start:
                    findings.append(
                        ScheduleFinding(
                            kind=FindingKind.NON_WORKING_SPAN,
                            message=(
                                f"Task '{task.name}' is scheduled entirely outside the working "
                                f"time of resource '{resource.name}'."
                            ),
                            node_id=task.id,
                            resource_id=resource.id,
                        )
                    )
                continue
            for day, minutes in overlaps:
                hours = _assignment_hours(assignment, minutes, total_minutes)
                if hours > 0:
                    bucket[(resource.id, day)].append((task, hours))

    return bucket, findings


def build_resource_conflicts(
    loads: DailyLoads,
    resolver: CalendarResolver,
    tolerance_hours: float = 1e-9,
) -> list[ResourceConflict]:
    conflicts: list[ResourceConflict] = []
    for (resource_id, day), values in loads.items():
        capacity = daily_capacity_hours(resolver, resource_id, day)
        total = sum(hours for _, hours in values)
        if total <= capacity + tolerance_hours:
            continue
        task_hours: dict[str, float] = defaultdict(float)
        task_name: dict[str, str] = {}
        for task, hours in values:
            task_hours[task.id] += hours
            task_name[task.id] = task.name
        entries = [
            ResourceConflictEntry(
                task_id=task_id,
                task_name=task_name.get(task_id, task_id),
                hours=hours,
            )
            for task_id, hours in task_hours.items()
        ]
        entries.sort(key=lambda e: (-e.hours, e.task_name.lower()))
        resource = resolver.resource(resource_id)
        conflicts.append(
            ResourceConflict(
                resource_id=resource_id,
                resource_name=resource.name if resource else resource_id,
                conflict_date=day,
                total_hours=total,
                capacity_hours=capacity,
                entries=tuple(entries),
            )
        )

    conflicts.sort(
        key=lambda c: (
            c.conflict_date,
            c.resource_name.lower(),
            -c.total_hours,
        )
    )
    return conflicts


def summarize_resource_loads(
    loads: DailyLoads,
    conflicts: Sequence[ResourceConflict],
    resolver: CalendarResolver,
) -> list[ResourceLoadSummary]:
    daily: dict[str, dict[date, float]] = defaultdict(lambda: defaultdict(float))
    for (resource_id, day), values in loads.items():
        daily[resource_id][day] += sum(hours for _, hours in values)

    overallocated: dict[str, int] = defaultdict(int)
    for conflict in conflicts:
        overallocated[conflict.resource_id] += 1

    summaries: list[ResourceLoadSummary] = []
    for resource_id, per_day in daily.items():
        resource = resolver.resource(resource_id)
        calendar = resolver.for_resource(resource_id)
        availability = float(resource.availability_percent) / 100.0 if resource else 1.0
        summaries.append(
            ResourceLoadSummary(
                resource_id=resource_id,
                resource_name=resource.name if resource else resource_id,
                total_hours=sum(per_day.values()),
                peak_daily_hours=max(per_day.values()),
                capacity_hours_per_day=calendar.hours_per_day * availability,
                overallocated_days=overallocated.get(resource_id, 0),
            )
        )
    summaries.sort(key=lambda s: s.resource_name.lower())
    return summaries


def daily_capacity_hours(resolver: CalendarResolver, resource_id: str, day: date) -> float:
    resource = resolver.resource(resource_id)
    availability = float(resource.availability_percent) / 100.0 if resource else 1.0
    return resolver.for_resource(resource_id).working_hours_on(day) * availability


def _assignment_hours(assignment: ResourceAssignment, minutes: int, total_minutes: int) -> float:
    allocated = float(assignment.allocated_hours or 0.0)
    if allocated > 0:
        return allocated * minutes / total_minutes
    return minutes / 60.0 * float(assignment.allocation_percent or 0.0) / 100.0


def _working_overlap(
    calendar: WorkCalendarEngine,
    start: datetime,
    end: datetime,
) -> Iterator[tuple[date, int]]:
    day = start.date()
    while day <= end.date():
        opens, closes = calendar.window(day)
        lo = max(opens, start)
        hi = min(closes, end)
        if hi > lo:
            yield day, int((hi - lo).total_seconds() // 60)
        day += timedelta(days=1)


__all__ = [
    "ResourceAllocator",
    "build_daily_loads",
    "build_resource_conflicts",
    "summarize_resource_loads",
    "daily_capacity_hours",
]
