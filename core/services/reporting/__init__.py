from .evm import EarnedValueCalculator, health_status, resolve_task_budget
from .models import EarnedValueMetrics, EvmSeriesPoint, TaskEarnedValue

__all__ = [
    "EarnedValueCalculator",
    "EarnedValueMetrics",
    "EvmSeriesPoint",
    "TaskEarnedValue",
    "health_status",
    "resolve_task_budget",
]
