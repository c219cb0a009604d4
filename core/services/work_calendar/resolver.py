from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

from core.domain.calendar import WorkingCalendar
from core.domain.enums import FindingKind
from core.domain.findings import ScheduleFinding
from core.domain.resource import Resource
from core.domain.task import Task
from core.exceptions import ValidationError
from core.services.work_calendar.engine import WorkCalendarEngine

logger = logging.getLogger(__name__)


class CalendarResolver:
    """
    Maps resources and tasks to the WorkCalendarEngine they are scheduled on.

    Resources without a calendar, or whose calendar is missing or unusable,
    fall back to the default calendar; the fallback is reported as a finding
    instead of failing the run.
    """

    def __init__(
        self,
        default_calendar: WorkingCalendar,
        calendars: Iterable[WorkingCalendar],
        resources: Iterable[Resource],
    ):
        default_calendar.validate()
        self._default = WorkCalendarEngine(default_calendar)
        self._findings: List[ScheduleFinding] = []
        self._engines: Dict[str, WorkCalendarEngine] = {}
        for cal in calendars:
            try:
                cal.validate()
            except ValidationError as exc:
                logger.warning("Ignoring invalid calendar %s: %s", cal.id, exc)
                continue
            self._engines[cal.id] = WorkCalendarEngine(cal)
        self._resources: Dict[str, Resource] = {r.id: r for r in resources}
        self._by_resource: Dict[str, WorkCalendarEngine] = {}
        for resource in self._resources.values():
            self._by_resource[resource.id] = self._resolve_resource(resource)

    @property
    def default(self) -> WorkCalendarEngine:
        return self._default

    @property
    def findings(self) -> list[ScheduleFinding]:
        return list(self._findings)

    def resource(self, resource_id: str) -> Optional[Resource]:
        return self._resources.get(resource_id)

    def for_resource(self, resource_id: str) -> WorkCalendarEngine:
        return self._by_resource.get(resource_id, self._default)

    def for_task(self, task: Task) -> WorkCalendarEngine:
        for assignment in task.assignments:
            if assignment.resource_id in self._resources:
                return self._by_resource[assignment.resource_id]
        return self._default

    def _resolve_resource(self, resource: Resource) -> WorkCalendarEngine:
        if not resource.calendar_id:
            return self._default
        engine = self._engines.get(resource.calendar_id)
        if engine is not None:
            return engine
        self._findings.append(
            ScheduleFinding(
                kind=FindingKind.CALENDAR_FALLBACK,
                message=(
                    f"Resource '{resource.name}' references calendar '{resource.calendar_id}' "
                    "which is missing or invalid; using the default calendar."
                ),
                resource_id=resource.id,
            )
        )
        return self._default


__all__ = ["CalendarResolver"]
