"""Project-level change notifications: schedule runs and task edits."""
from core.events.signal import Signal


class DomainEvents:
    def __init__(self) -> None:
        self.schedule_recalculated: Signal[str] = Signal("schedule_recalculated")  # project_id
        self.tasks_changed: Signal[str] = Signal("tasks_changed")  # project_id


# SINGLE global instance
domain_events = DomainEvents()
