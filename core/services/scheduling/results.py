from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional

from core.domain.enums import DependencyType, FindingKind
from core.domain.findings import ScheduleFinding
from core.domain.milestone import Milestone
from core.domain.task import Task
from core.services.scheduling.graph import DependencyGraph
from core.services.scheduling.models import CPMTaskInfo, ScheduleResult
from core.services.scheduling.passes import lag_hours
from core.services.work_calendar.engine import WorkCalendarEngine


def build_node_infos(
    graph: DependencyGraph,
    durations: Dict[str, float],
    calendars: Dict[str, WorkCalendarEngine],
    es: Dict[str, datetime],
    ef: Dict[str, datetime],
    ls: Dict[str, datetime],
    lf: Dict[str, datetime],
    project_finish: datetime,
) -> tuple[Dict[str, CPMTaskInfo], List[ScheduleFinding]]:
    nodes: Dict[str, CPMTaskInfo] = {}
    findings: List[ScheduleFinding] = []

    for node_id in graph.topo_order:
        node = graph.nodes[node_id]
        calendar = calendars[node_id]

        total_float = calendar.working_hours_between(es[node_id], ls[node_id])
        if total_float < 0:
            findings.append(
                ScheduleFinding(
                    kind=FindingKind.NEGATIVE_FLOAT,
                    message=(
                        f"'{node.name}' has negative float ({total_float:.2f} h); "
                        "recorded dates conflict with its dependencies."
                    ),
                    node_id=node_id,
                    hours=total_float,
                )
            )
            total_float = 0.0

        free_float = _free_float(graph, node_id, calendars, es, ef, project_finish)
        free_float = min(max(0.0, free_float), total_float)

        deadline = _deadline_of(node.task, node.milestone)
        late_by = None
        if deadline is not None:
            due = calendar.to_instant(deadline + timedelta(days=1))
            if ef[node_id] > due:
                late_by = calendar.working_hours_between(due, ef[node_id])
                findings.append(
                    ScheduleFinding(
                        kind=FindingKind.DEADLINE_MISSED,
                        message=(
                            f"'{node.name}' finishes {late_by:.2f} working hours "
                            f"after its deadline {deadline.isoformat()}."
                        ),
                        node_id=node_id,
                        day=deadline,
                        hours=late_by,
                    )
                )

        nodes[node_id] = CPMTaskInfo(
            node_id=node_id,
            name=node.name,
            is_milestone=node.is_milestone,
            duration_hours=durations[node_id],
            earliest_start=es[node_id],
            earliest_finish=ef[node_id],
            latest_start=ls[node_id],
            latest_finish=lf[node_id],
            total_float_hours=total_float,
            free_float_hours=free_float,
            is_critical=total_float == 0,
            calendar_id=calendar.calendar.id,
            deadline=deadline,
            late_by_hours=late_by,
        )

    return nodes, findings


def build_critical_path(graph: DependencyGraph, nodes: Dict[str, CPMTaskInfo]) -> tuple[str, ...]:
    """Every zero-float node, ordered by earliest start then topological position."""
    position = {node_id: index for index, node_id in enumerate(graph.topo_order)}
    critical = [node_id for node_id in graph.topo_order if nodes[node_id].is_critical]
    critical.sort(key=lambda node_id: (nodes[node_id].earliest_start, position[node_id]))
    return tuple(critical)


def _free_float(
    graph: DependencyGraph,
    node_id: str,
    calendars: Dict[str, WorkCalendarEngine],
    es: Dict[str, datetime],
    ef: Dict[str, datetime],
    project_finish: datetime,
) -> float:
    calendar = calendars[node_id]
    outgoing = graph.outgoing.get(node_id, [])
    if not outgoing:
        return calendar.working_hours_between(ef[node_id], project_finish)

    slips: List[float] = []
    for edge in outgoing:
        succ = edge.successor_id
        succ_calendar = calendars[succ]
        lag = lag_hours(edge, succ_calendar)
        if edge.dependency_type == DependencyType.FINISH_TO_START:
            allowed = succ_calendar.subtract_working_hours(es[succ], lag)
            slips.append(calendar.working_hours_between(ef[node_id], allowed))
        elif edge.dependency_type == DependencyType.FINISH_TO_FINISH:
            allowed = succ_calendar.subtract_working_hours(ef[succ], lag)
            slips.append(calendar.working_hours_between(ef[node_id], allowed))
        elif edge.dependency_type == DependencyType.START_TO_START:
            allowed = succ_calendar.subtract_working_hours(es[succ], lag)
            slips.append(calendar.working_hours_between(es[node_id], allowed))
        elif edge.dependency_type == DependencyType.START_TO_FINISH:
            allowed = succ_calendar.subtract_working_hours(ef[succ], lag)
            slips.append(calendar.working_hours_between(es[node_id], allowed))
    return min(slips)


def _deadline_of(task: Optional[Task], milestone: Optional[Milestone]) -> Optional[date]:
    if task is not None:
        return task.deadline
    if milestone is not None:
        return milestone.target_date
    return None


def apply_schedule_to_tasks(tasks: Iterable[Task], result: ScheduleResult) -> list[Task]:
    """
    Return copies of `tasks` carrying the derived critical flag and slack.
    Tasks the result knows nothing about are returned unchanged.
    """
    updated: list[Task] = []
    for task in tasks:
        info = result.nodes.get(task.id)
        if info is None:
            updated.append(task)
            continue
        updated.append(
            replace(
                task,
                is_critical_path=info.is_critical,
                slack_hours=info.total_float_hours,
            )
        )
    return updated


def apply_schedule_to_milestones(milestones: Iterable[Milestone], result: ScheduleResult) -> list[Milestone]:
    return [
        replace(m, is_critical_path=result.is_critical(m.id)) if m.id in result.nodes else m
        for m in milestones
    ]


__all__ = [
    "build_node_infos",
    "build_critical_path",
    "apply_schedule_to_tasks",
    "apply_schedule_to_milestones",
]
