from __future__ import annotations

import calendar
import logging
from datetime import date
from typing import Dict, List, Mapping, Optional

from core.domain.enums import HealthStatus, ResourceKind
from core.domain.project import ProjectSnapshot
from core.domain.resource import Resource
from core.domain.task import Task
from core.services.reporting.models import EarnedValueMetrics, EvmSeriesPoint, TaskEarnedValue
from core.services.scheduling.config import SchedulingConfig
from core.services.scheduling.models import CPMTaskInfo, ScheduleResult

logger = logging.getLogger(__name__)

HEALTH_GREEN_THRESHOLD = 0.95
HEALTH_YELLOW_THRESHOLD = 0.85


def clamp01(x: float) -> float:
    return max(0.0, min(1.0, x))


def health_status(index: Optional[float]) -> Optional[HealthStatus]:
    if index is None:
        return None
    if index >= HEALTH_GREEN_THRESHOLD:
        return HealthStatus.GREEN
    if index >= HEALTH_YELLOW_THRESHOLD:
        return HealthStatus.YELLOW
    return HealthStatus.RED


def resolve_task_budget(
    task: Task,
    resources_by_id: Mapping[str, Resource],
    duration_hours: float = 0.0,
) -> float:
    """
    Budgeted cost of a task: the stated calculated cost when present, otherwise
    labor hours times bill rate plus the flat cost of flat-cost resources.
    Assignments without booked hours are costed over the scheduled duration.
    """
    if task.calculated_cost is not None:
        return float(task.calculated_cost)
    total = 0.0
    for assignment in task.assignments:
        resource = resources_by_id.get(assignment.resource_id)
        if resource is None:
            continue
        if resource.kind == ResourceKind.FLAT_COST:
            total += float(resource.flat_cost or 0.0)
            continue
        hours = float(assignment.allocated_hours or 0.0)
        if hours <= 0:
            hours = duration_hours * float(assignment.allocation_percent or 0.0) / 100.0
        total += hours * float(resource.bill_rate or 0.0)
    return total


class EarnedValueCalculator:
    """
    Earned Value (EVM) over a computed schedule.

    - BAC: sum of task budgets.
    - PV: budget pro-rated by the working time of each task elapsed by the end of the report date.
    - EV: budget * percent complete.
    - AC: sum of recorded actual costs.

    Divisions by zero never raise: the affected index is None and a note explains why.
    """

    def __init__(self, config: Optional[SchedulingConfig] = None):
        self._config: SchedulingConfig = config or SchedulingConfig()

    def calculate(
        self,
        snapshot: ProjectSnapshot,
        schedule: ScheduleResult,
        report_date: Optional[date] = None,
    ) -> EarnedValueMetrics:
        as_of = report_date or snapshot.report_date or date.today()
        notes: List[str] = []

        resources_by_id: Dict[str, Resource] = {r.id: r for r in snapshot.resources}

        rows: List[TaskEarnedValue] = []
        for task in snapshot.tasks:
            info = schedule.nodes.get(task.id)
            duration = info.duration_hours if info else 0.0
            budget = resolve_task_budget(task, resources_by_id, duration)
            fraction = self._planned_fraction(info, as_of)
            rows.append(
                TaskEarnedValue(
                    task_id=task.id,
                    task_name=task.name,
                    budget=budget,
                    planned_fraction=fraction,
                    PV=budget * fraction,
                    EV=budget * clamp01(float(task.percent_complete or 0.0)),
                    AC=float(task.actual_cost or 0.0),
                )
            )

        BAC = sum(r.budget for r in rows)
        PV = sum(r.PV for r in rows)
        EV = sum(r.EV for r in rows)
        AC = sum(r.AC for r in rows)

        if BAC <= 0:
            notes.append("BAC is 0 (no task carries a budget); percentages are undefined.")
        if AC <= 0:
            notes.append("CPI is undefined because AC is 0 (no actual costs recorded).")
        if PV <= 0:
            notes.append("SPI is undefined because PV is 0 (no work planned by the report date).")

        CV = EV - AC
        SV = EV - PV
        CPI = (EV / AC) if AC > 0 else None
        SPI = (EV / PV) if PV > 0 else None

        if CPI is not None and CPI > 0:
            EAC = BAC / CPI
        else:
            EAC = BAC + (AC - EV)
            if AC > 0:
                notes.append("EAC uses BAC + (AC - EV) because CPI is 0.")
            else:
                notes.append("EAC uses BAC + (AC - EV) because CPI is undefined.")
        ETC = EAC - AC
        VAC = BAC - EAC

        TCPI_to_BAC = None
        den_bac = BAC - AC
        if den_bac > 0:
            TCPI_to_BAC = (BAC - EV) / den_bac
        elif BAC > 0:
            notes.append("TCPI(BAC) N/A AC >= BAC (already over budget).")

        metrics = EarnedValueMetrics(
            as_of=as_of,
            BAC=BAC,
            PV=PV,
            EV=EV,
            AC=AC,
            CV=CV,
            SV=SV,
            CPI=CPI,
            SPI=SPI,
            EAC=EAC,
            ETC=ETC,
            VAC=VAC,
            TCPI_to_BAC=TCPI_to_BAC,
            percent_complete=(EV / BAC) if BAC > 0 else None,
            percent_spent=(AC / BAC) if BAC > 0 else None,
            schedule_health=health_status(SPI),
            cost_health=health_status(CPI),
            tasks=tuple(rows),
            notes=tuple(notes),
        )
        logger.debug(
            "EVM as of %s: BAC=%.2f PV=%.2f EV=%.2f AC=%.2f", as_of, BAC, PV, EV, AC
        )
        return metrics

    def series(
        self,
        snapshot: ProjectSnapshot,
        schedule: ScheduleResult,
        as_of: Optional[date] = None,
    ) -> list[EvmSeriesPoint]:
        """
        Cumulative PV/EV/AC at each month end from the project start through `as_of`.
        EV and AC reflect the current snapshot at every point.
        """
        as_of = as_of or snapshot.report_date or date.today()
        points: list[date] = []
        cur = _month_end(snapshot.project_start)
        end = _month_end(as_of)
        while cur <= end:
            points.append(cur)
            cur = _month_end(_add_months(cur, 1))

        out: list[EvmSeriesPoint] = []
        for pe in points:
            evm = self.calculate(snapshot, schedule, report_date=pe)
            out.append(EvmSeriesPoint(pe, evm.PV, evm.EV, evm.AC, evm.BAC, evm.CPI, evm.SPI))
        return out

    @staticmethod
    def _planned_fraction(info: Optional[CPMTaskInfo], as_of: date) -> float:
        """
        Share of the task's calendar days elapsed by `as_of`, counting both the
        first day and the report date itself.
        """
        if info is None:
            return 0.0
        start = info.earliest_start.date()
        finish = info.earliest_finish.date()
        if as_of < start:
            return 0.0
        if as_of >= finish:
            return 1.0
        return clamp01(((as_of - start).days + 1) / ((finish - start).days + 1))


def _month_end(d: date) -> date:
    last = calendar.monthrange(d.year, d.month)[1]
    return date(d.year, d.month, last)


def _add_months(d: date, months: int) -> date:
    y = d.year + (d.month - 1 + months) // 12
    m = (d.month - 1 + months) % 12 + 1
    day = min(d.day, calendar.monthrange(y, m)[1])
    return date(y, m, day)


__all__ = [
    "EarnedValueCalculator",
    "resolve_task_budget",
    "health_status",
]
