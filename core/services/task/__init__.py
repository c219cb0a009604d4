from core.services.task.service import TaskService

__all__ = ["TaskService"]
