# core/services/scheduling/engine.py
from __future__ import annotations

import logging
from typing import Dict, List, Optional

from core.domain.enums import FindingKind
from core.domain.findings import ScheduleFinding
from core.domain.project import ProjectSnapshot
from core.services.scheduling.cancellation import CancelToken
from core.services.scheduling.config import SchedulingConfig
from core.services.scheduling.durations import resolve_task_duration_hours
from core.services.scheduling.graph import DependencyGraph, build_dependency_graph
from core.services.scheduling.leveling import ResourceAllocator
from core.services.scheduling.models import ScheduleResult
from core.services.scheduling.passes import run_backward_pass, run_forward_pass
from core.services.scheduling.results import build_critical_path, build_node_infos
from core.services.work_calendar.engine import WorkCalendarEngine
from core.services.work_calendar.resolver import CalendarResolver

logger = logging.getLogger(__name__)


class SchedulingEngine:
    """
    CPM-style scheduling engine:
    - Forward pass: ES/EF
    - Backward pass: LS/LF
    - FS, FF, SS, SF with lag_days (negative lag is lead time)
    - Working-time arithmetic per task calendar via WorkCalendarEngine
    - Resource allocation cross-check (reported, never resolved)

    Every run is a pure function of the snapshot and the config; inputs are
    never mutated and nothing is kept between runs.
    """

    def __init__(self, config: Optional[SchedulingConfig] = None):
        self._config: SchedulingConfig = config or SchedulingConfig()

    @property
    def config(self) -> SchedulingConfig:
        return self._config

    def calendar_resolver(self, snapshot: ProjectSnapshot) -> CalendarResolver:
        return CalendarResolver(
            default_calendar=self._config.default_calendar,
            calendars=snapshot.calendars,
            resources=snapshot.resources,
        )

    def compute(
        self,
        snapshot: ProjectSnapshot,
        cancel_token: Optional[CancelToken] = None,
    ) -> ScheduleResult:
        """
        Full CPM calculation over a snapshot.

        Raises DanglingReferenceError / CircularDependencyError before either
        pass runs. Everything else is returned as findings on the result.
        """
        _checkpoint(cancel_token)
        resolver = self.calendar_resolver(snapshot)
        graph = build_dependency_graph(snapshot.tasks, snapshot.milestones)
        logger.info(
            "Scheduling run start: project=%s nodes=%s edges=%s",
            snapshot.project_id or "-",
            len(graph.nodes),
            graph.edge_count,
        )

        calendars, durations, findings = self._resolve_nodes(graph, resolver)
        findings[:0] = resolver.findings
        project_start = resolver.default.to_instant(snapshot.project_start)

        _checkpoint(cancel_token)
        es, ef, project_finish = run_forward_pass(graph, durations, calendars, project_start)
        _checkpoint(cancel_token)
        ls, lf = run_backward_pass(graph, durations, calendars, project_finish)
        _checkpoint(cancel_token)

        nodes, node_findings = build_node_infos(
            graph, durations, calendars, es, ef, ls, lf, project_finish
        )
        findings.extend(node_findings)
        critical_path = build_critical_path(graph, nodes)

        allocation = ResourceAllocator(
            resolver, tolerance_hours=self._config.overallocation_tolerance_hours
        ).allocate(snapshot.tasks, nodes)
        findings.extend(allocation.findings)
        _checkpoint(cancel_token)

        duration_hours = resolver.default.working_hours_between(project_start, project_finish)
        result = ScheduleResult(
            project_start=project_start,
            project_finish=project_finish,
            project_duration_hours=duration_hours,
            project_duration_days=duration_hours / resolver.default.hours_per_day,
            critical_path=critical_path,
            nodes=nodes,
            findings=tuple(findings),
            resource_conflicts=allocation.conflicts,
            resource_loads=allocation.loads,
        )
        logger.info(
            "Scheduling run complete: project=%s duration=%.2fh critical=%s findings=%s",
            snapshot.project_id or "-",
            duration_hours,
            len(critical_path),
            len(findings),
        )
        return result

    def _resolve_nodes(
        self,
        graph: DependencyGraph,
        resolver: CalendarResolver,
    ) -> tuple[Dict[str, WorkCalendarEngine], Dict[str, float], List[ScheduleFinding]]:
        calendars: Dict[str, WorkCalendarEngine] = {}
        durations: Dict[str, float] = {}
        findings: List[ScheduleFinding] = []

        for node_id, node in graph.nodes.items():
            task = node.task
            if task is None:
                calendars[node_id] = resolver.default
                durations[node_id] = 0.0
                continue

            calendar = resolver.for_task(task)
            calendars[node_id] = calendar
            durations[node_id] = resolve_task_duration_hours(
                task,
                calendar,
                resolver,
                buffer_percent=self._config.buffer_percent,
            )
            if (
                task.scheduled_start is not None
                and task.deadline is not None
                and not calendar.has_working_time(task.scheduled_start, task.deadline)
            ):
                findings.append(
                    ScheduleFinding(
                        kind=FindingKind.NON_WORKING_SPAN,
                        message=(
                            f"Task '{task.name}' spans {task.scheduled_start.isoformat()} to "
                            f"{task.deadline.isoformat()}, which contains no working time."
                        ),
                        node_id=node_id,
                    )
                )
            logger.debug(
                "Node %s: calendar=%s duration=%.2fh",
                node_id,
                calendar.calendar.id,
                durations[node_id],
            )

        return calendars, durations, findings


def _checkpoint(token: Optional[CancelToken]) -> None:
    if token is not None:
        token.raise_if_cancelled()


__all__ = ["SchedulingEngine"]
