from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, Optional, Tuple

from core.domain.findings import ScheduleFinding
from core.services.scheduling.leveling_models import ResourceConflict, ResourceLoadSummary


@dataclass(frozen=True)
class CPMTaskInfo:
    node_id: str
    name: str
    is_milestone: bool
    duration_hours: float
    earliest_start: datetime
    earliest_finish: datetime
    latest_start: datetime
    latest_finish: datetime
    total_float_hours: float
    free_float_hours: float
    is_critical: bool
    calendar_id: str
    deadline: Optional[date] = None
    late_by_hours: Optional[float] = None


@dataclass(frozen=True)
class ScheduleResult:
    project_start: datetime
    project_finish: datetime
    project_duration_hours: float
    project_duration_days: float
    critical_path: Tuple[str, ...] = ()
    nodes: Dict[str, CPMTaskInfo] = field(default_factory=dict)
    findings: Tuple[ScheduleFinding, ...] = ()
    resource_conflicts: Tuple[ResourceConflict, ...] = ()
    resource_loads: Tuple[ResourceLoadSummary, ...] = ()

    @property
    def slack(self) -> Dict[str, float]:
        return {node_id: info.total_float_hours for node_id, info in self.nodes.items()}

    @property
    def timings(self) -> Dict[str, tuple[datetime, datetime, datetime, datetime]]:
        return {
            node_id: (
                info.earliest_start,
                info.earliest_finish,
                info.latest_start,
                info.latest_finish,
            )
            for node_id, info in self.nodes.items()
        }

    def is_critical(self, node_id: str) -> bool:
        info = self.nodes.get(node_id)
        return bool(info and info.is_critical)


__all__ = ["CPMTaskInfo", "ScheduleResult"]
