from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from core.events.domain_events import domain_events
from core.exceptions import NotFoundError
from core.interfaces import MilestoneRepository, ProjectRepository, TaskRepository
from core.models import Milestone, Task

logger = logging.getLogger(__name__)


class TaskService:
    def __init__(
        self,
        session: Session,
        task_repo: TaskRepository,
        milestone_repo: MilestoneRepository,
        project_repo: ProjectRepository | None = None,
    ):
        self._session: Session = session
        self._task_repo: TaskRepository = task_repo
        self._milestone_repo: MilestoneRepository = milestone_repo
        self._project_repo: ProjectRepository | None = project_repo

    def create_task(self, project_id: str, name: str, description: str = "", **fields) -> Task:
        self._require_project(project_id)
        task = Task.create(name=name, project_id=project_id, description=description, **fields)
        try:
            self._task_repo.add(task)
            self._session.commit()
        except Exception as exc:
            self._session.rollback()
            logger.error(f"Error creating task: {exc}")
            raise
        logger.info(f"Created task {task.id} - {task.name} for project {project_id}")
        domain_events.tasks_changed.emit(project_id)
        return task

    def update_task(self, task: Task) -> Task:
        task.validate()
        if self._task_repo.get(task.id) is None:
            raise NotFoundError("Task not found.", code="TASK_NOT_FOUND")
        try:
            self._task_repo.update(task)
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise
        domain_events.tasks_changed.emit(task.project_id)
        return task

    def record_progress(
        self,
        task_id: str,
        percent_complete: float,
        recorded_at: Optional[datetime] = None,
    ) -> Task:
        """Append a progress entry; progress may stay flat but never goes back."""
        task = self._task_repo.get(task_id)
        if not task:
            raise NotFoundError("Task not found.", code="TASK_NOT_FOUND")
        updated = task.record_progress(percent_complete, recorded_at or datetime.now())
        if updated.actual_start is None and percent_complete > 0:
            updated = replace(updated, actual_start=updated.percent_complete_history[-1].recorded_at.date())
        try:
            self._task_repo.update(updated)
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise
        domain_events.tasks_changed.emit(updated.project_id)
        return updated

    def delete_task(self, task_id: str) -> None:
        task = self._task_repo.get(task_id)
        if not task:
            raise NotFoundError("Task not found.", code="TASK_NOT_FOUND")
        try:
            self._task_repo.delete(task_id)
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise
        domain_events.tasks_changed.emit(task.project_id)

    def list_tasks(self, project_id: str) -> List[Task]:
        return self._task_repo.list_by_project(project_id)

    def create_milestone(self, project_id: str, name: str, **fields) -> Milestone:
        self._require_project(project_id)
        milestone = Milestone.create(name=name, project_id=project_id, **fields)
        try:
            self._milestone_repo.add(milestone)
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise
        domain_events.tasks_changed.emit(project_id)
        return milestone

    def _require_project(self, project_id: str) -> None:
        if self._project_repo is not None and self._project_repo.get(project_id) is None:
            raise NotFoundError("Project not found.", code="PROJECT_NOT_FOUND")
