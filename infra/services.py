from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from sqlalchemy.orm import Session

from core.services.reporting import EarnedValueCalculator
from core.services.scheduling import SchedulingConfig, SchedulingEngine
from core.services.scheduling_service import RunRecorder, ScheduleRun, SchedulingService
from core.services.task import TaskService
from infra.db.repositories import (
    SqlAlchemyMilestoneRepository,
    SqlAlchemyProjectRepository,
    SqlAlchemyResourceRepository,
    SqlAlchemySnapshotReader,
    SqlAlchemyTaskRepository,
    SqlAlchemyWorkingCalendarRepository,
)
from infra.operational_support import OperationalSupport, bind_trace_id


@dataclass(frozen=True)
class ServiceGraph:
    session: Session
    config: SchedulingConfig
    project_repo: SqlAlchemyProjectRepository
    task_repo: SqlAlchemyTaskRepository
    milestone_repo: SqlAlchemyMilestoneRepository
    resource_repo: SqlAlchemyResourceRepository
    calendar_repo: SqlAlchemyWorkingCalendarRepository
    scheduling_engine: SchedulingEngine
    evm_calculator: EarnedValueCalculator
    task_service: TaskService
    scheduling_service: SchedulingService

    def as_dict(self) -> dict[str, Any]:
        return {
            "session": self.session,
            "config": self.config,
            "project_repo": self.project_repo,
            "task_repo": self.task_repo,
            "milestone_repo": self.milestone_repo,
            "resource_repo": self.resource_repo,
            "calendar_repo": self.calendar_repo,
            "scheduling_engine": self.scheduling_engine,
            "evm_calculator": self.evm_calculator,
            "task_service": self.task_service,
            "scheduling_service": self.scheduling_service,
        }


def _support_recorder(support: OperationalSupport) -> RunRecorder:
    def record(run: ScheduleRun) -> None:
        support.emit_event(
            event_type="schedule.recalculated",
            message=f"Recalculated project {run.project_id}",
            trace_id=run.trace_id,
            data={
                "project_id": run.project_id,
                "project_finish": run.schedule.project_finish.isoformat(),
                "critical_path": list(run.schedule.critical_path),
                "findings": [finding.kind.value for finding in run.schedule.findings],
                "cpi": run.evm.CPI,
                "spi": run.evm.SPI,
            },
        )

    return record


def build_service_graph(
    session: Session,
    config: SchedulingConfig | None = None,
    support: OperationalSupport | None = None,
) -> ServiceGraph:
    """Single composition root. Pass `support` to log every recalculation as a support event."""
    config = config or SchedulingConfig.from_env()

    project_repo = SqlAlchemyProjectRepository(session)
    task_repo = SqlAlchemyTaskRepository(session)
    milestone_repo = SqlAlchemyMilestoneRepository(session)
    resource_repo = SqlAlchemyResourceRepository(session)
    calendar_repo = SqlAlchemyWorkingCalendarRepository(session)

    scheduling_engine = SchedulingEngine(config)
    evm_calculator = EarnedValueCalculator(config)
    task_service = TaskService(session, task_repo, milestone_repo, project_repo=project_repo)
    scheduling_service = SchedulingService(
        session,
        SqlAlchemySnapshotReader(session),
        task_repo,
        milestone_repo,
        scheduling_engine,
        evm_calculator=evm_calculator,
        trace_scope=bind_trace_id,
        run_recorder=_support_recorder(support) if support is not None else None,
    )

    return ServiceGraph(
        session=session,
        config=config,
        project_repo=project_repo,
        task_repo=task_repo,
        milestone_repo=milestone_repo,
        resource_repo=resource_repo,
        calendar_repo=calendar_repo,
        scheduling_engine=scheduling_engine,
        evm_calculator=evm_calculator,
        task_service=task_service,
        scheduling_service=scheduling_service,
    )


def build_service_dict(
    session: Session,
    config: SchedulingConfig | None = None,
    support: OperationalSupport | None = None,
) -> dict[str, Any]:
    return build_service_graph(session, config, support).as_dict()
