from __future__ import annotations

from datetime import datetime
from typing import Dict, List

from core.domain.enums import DependencyType
from core.services.scheduling.graph import DependencyGraph, GraphEdge
from core.services.work_calendar.engine import WorkCalendarEngine


def lag_hours(edge: GraphEdge, successor_calendar: WorkCalendarEngine) -> float:
    """Lag is expressed in working days of the successor's calendar."""
    return edge.lag_days * successor_calendar.hours_per_day


def run_forward_pass(
    graph: DependencyGraph,
    durations: Dict[str, float],
    calendars: Dict[str, WorkCalendarEngine],
    project_start: datetime,
) -> tuple[Dict[str, datetime], Dict[str, datetime], datetime]:
    es: Dict[str, datetime] = {}
    ef: Dict[str, datetime] = {}

    for node_id in graph.topo_order:
        node = graph.nodes[node_id]
        calendar = calendars[node_id]
        duration = durations[node_id]
        task = node.task

        candidates: List[datetime] = [project_start]
        if task is not None and task.scheduled_start is not None:
            candidates.append(calendar.to_instant(task.scheduled_start))
        if task is not None and task.actual_start is not None:
            candidates.append(calendar.to_instant(task.actual_start))

        for edge in graph.incoming.get(node_id, []):
            lag = lag_hours(edge, calendar)
            pred = edge.predecessor_id
            if edge.dependency_type == DependencyType.FINISH_TO_START:
                candidates.append(calendar.add_working_hours(ef[pred], lag))
            elif edge.dependency_type == DependencyType.START_TO_START:
                candidates.append(calendar.add_working_hours(es[pred], lag))
            elif edge.dependency_type == DependencyType.FINISH_TO_FINISH:
                # EF_s >= EF_p + lag
                finish = calendar.add_working_hours(ef[pred], lag)
                candidates.append(calendar.subtract_working_hours(finish, duration))
            elif edge.dependency_type == DependencyType.START_TO_FINISH:
                # EF_s >= ES_p + lag
                finish = calendar.add_working_hours(es[pred], lag)
                candidates.append(calendar.subtract_working_hours(finish, duration))

        est = max(candidates)
        if duration > 0:
            est = calendar.snap_to_working_start(est)
            eft = calendar.add_working_hours(est, duration)
        else:
            eft = est

        if task is not None and task.actual_end is not None:
            est, eft = _fixed_by_actual_end(task.actual_start, task.actual_end, duration, calendar)

        es[node_id] = est
        ef[node_id] = eft

    project_finish = max(ef.values()) if ef else project_start
    return es, ef, project_finish


def _fixed_by_actual_end(actual_start, actual_end, duration: float, calendar: WorkCalendarEngine):
    """A recorded finish pins EF to the close of that day."""
    _opens, closes = calendar.window(actual_end)
    if actual_start is not None:
        fixed_es = min(calendar.to_instant(actual_start), closes)
    elif duration > 0:
        fixed_es = calendar.subtract_working_hours(closes, duration)
    else:
        fixed_es = closes
    return fixed_es, closes


def run_backward_pass(
    graph: DependencyGraph,
    durations: Dict[str, float],
    calendars: Dict[str, WorkCalendarEngine],
    project_finish: datetime,
) -> tuple[Dict[str, datetime], Dict[str, datetime]]:
    ls: Dict[str, datetime] = {}
    lf: Dict[str, datetime] = {}

    for node_id in reversed(graph.topo_order):
        calendar = calendars[node_id]
        duration = durations[node_id]

        candidates: List[datetime] = [project_finish]
        for edge in graph.outgoing.get(node_id, []):
            succ = edge.successor_id
            succ_calendar = calendars[succ]
            lag = lag_hours(edge, succ_calendar)
            if edge.dependency_type == DependencyType.FINISH_TO_START:
                candidates.append(succ_calendar.subtract_working_hours(ls[succ], lag))
            elif edge.dependency_type == DependencyType.FINISH_TO_FINISH:
                candidates.append(succ_calendar.subtract_working_hours(lf[succ], lag))
            elif edge.dependency_type == DependencyType.START_TO_START:
                latest_start = succ_calendar.subtract_working_hours(ls[succ], lag)
                candidates.append(calendar.add_working_hours(latest_start, duration))
            elif edge.dependency_type == DependencyType.START_TO_FINISH:
                latest_start = succ_calendar.subtract_working_hours(lf[succ], lag)
                candidates.append(calendar.add_working_hours(latest_start, duration))

        lft = min(candidates)
        if duration > 0:
            lst = calendar.subtract_working_hours(lft, duration)
            # normalise a finish sitting on the next morning back to the close of the working day
            lft = calendar.add_working_hours(lst, duration)
        else:
            lst = lft

        ls[node_id] = lst
        lf[node_id] = lft

    return ls, lf


__all__ = ["run_forward_pass", "run_backward_pass", "lag_hours"]
