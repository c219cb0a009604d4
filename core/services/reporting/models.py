from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional, Tuple

from core.domain.enums import HealthStatus


@dataclass(frozen=True)
class EvmSeriesPoint:
    period_end: date
    PV: float
    EV: float
    AC: float
    BAC: float
    CPI: Optional[float]
    SPI: Optional[float]


@dataclass(frozen=True)
class TaskEarnedValue:
    task_id: str
    task_name: str
    budget: float
    planned_fraction: float
    PV: float
    EV: float
    AC: float


@dataclass(frozen=True)
class EarnedValueMetrics:
    as_of: date

    BAC: float
    PV: float
    EV: float
    AC: float

    CV: float
    SV: float
    CPI: Optional[float]
    SPI: Optional[float]
    EAC: float
    ETC: float
    VAC: float
    TCPI_to_BAC: Optional[float] = None

    percent_complete: Optional[float] = None
    percent_spent: Optional[float] = None
    schedule_health: Optional[HealthStatus] = None
    cost_health: Optional[HealthStatus] = None
    tasks: Tuple[TaskEarnedValue, ...] = ()
    notes: Tuple[str, ...] = ()


__all__ = ["EvmSeriesPoint", "TaskEarnedValue", "EarnedValueMetrics"]
