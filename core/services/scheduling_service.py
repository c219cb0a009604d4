# core/services/scheduling_service.py
from __future__ import annotations

import logging
from contextlib import nullcontext
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, ContextManager, Optional

from sqlalchemy.orm import Session

from core.events.domain_events import domain_events
from core.interfaces import MilestoneRepository, ProjectSnapshotReader, TaskRepository
from core.models import Milestone, Task
from core.services.reporting import EarnedValueCalculator, EarnedValueMetrics
from core.services.scheduling import (
    CancelToken,
    ResourceConflict,
    ScheduleResult,
    SchedulingEngine,
    apply_schedule_to_milestones,
    apply_schedule_to_tasks,
)

logger = logging.getLogger(__name__)

TraceScope = Callable[[], ContextManager[Optional[str]]]
RunRecorder = Callable[["ScheduleRun"], None]


@dataclass(frozen=True)
class ScheduleRun:
    project_id: str
    schedule: ScheduleResult
    evm: EarnedValueMetrics
    trace_id: Optional[str] = None
    tasks: tuple[Task, ...] = field(default_factory=tuple)
    milestones: tuple[Milestone, ...] = field(default_factory=tuple)


class SchedulingService:
    """
    Loads a project snapshot, runs the engine end to end (graph, passes,
    allocation, EVM) and persists the derived critical flag / slack in one
    transaction. Structural errors leave the store untouched.
    """

    def __init__(
        self,
        session: Session,
        snapshot_reader: ProjectSnapshotReader,
        task_repo: TaskRepository,
        milestone_repo: MilestoneRepository,
        engine: SchedulingEngine,
        evm_calculator: EarnedValueCalculator | None = None,
        trace_scope: TraceScope | None = None,
        run_recorder: RunRecorder | None = None,
    ):
        self._session: Session = session
        self._snapshot_reader: ProjectSnapshotReader = snapshot_reader
        self._task_repo: TaskRepository = task_repo
        self._milestone_repo: MilestoneRepository = milestone_repo
        self._engine: SchedulingEngine = engine
        self._evm: EarnedValueCalculator = evm_calculator or EarnedValueCalculator(engine.config)
        self._trace_scope: TraceScope = trace_scope or (lambda: nullcontext(None))
        self._run_recorder: RunRecorder | None = run_recorder

    def recalculate(
        self,
        project_id: str,
        report_date: Optional[date] = None,
        cancel_token: Optional[CancelToken] = None,
    ) -> ScheduleRun:
        with self._trace_scope() as trace_id:
            snapshot = self._snapshot_reader.load(project_id, report_date=report_date)
            schedule = self._engine.compute(snapshot, cancel_token=cancel_token)
            evm = self._evm.calculate(snapshot, schedule, report_date=report_date)
            if cancel_token is not None:
                cancel_token.raise_if_cancelled()

            tasks = apply_schedule_to_tasks(snapshot.tasks, schedule)
            milestones = apply_schedule_to_milestones(snapshot.milestones, schedule)
            try:
                for task in tasks:
                    self._task_repo.update_schedule_fields(task)
                for milestone in milestones:
                    self._milestone_repo.update(milestone)
                self._session.commit()
            except Exception as exc:
                self._session.rollback()
                logger.error(f"Error saving schedule for project {project_id}: {exc}")
                raise

            logger.info(
                f"Recalculated schedule for project {project_id}: "
                f"{len(schedule.critical_path)} critical node(s), {len(schedule.findings)} finding(s)"
            )
            run = ScheduleRun(
                project_id=project_id,
                schedule=schedule,
                evm=evm,
                trace_id=trace_id,
                tasks=tuple(tasks),
                milestones=tuple(milestones),
            )
            if self._run_recorder is not None:
                self._run_recorder(run)
            domain_events.schedule_recalculated.emit(project_id)
            return run

    def preview(self, project_id: str, report_date: Optional[date] = None) -> ScheduleResult:
        """Compute without writing anything back."""
        with self._trace_scope():
            snapshot = self._snapshot_reader.load(project_id, report_date=report_date)
            return self._engine.compute(snapshot)

    def preview_resource_conflicts(self, project_id: str) -> list[ResourceConflict]:
        return list(self.preview(project_id).resource_conflicts)


__all__ = ["RunRecorder", "SchedulingService", "ScheduleRun"]
