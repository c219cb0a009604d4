from .reporting import EarnedValueCalculator, EarnedValueMetrics
from .scheduling import CPMTaskInfo, ScheduleResult, SchedulingConfig, SchedulingEngine
from .scheduling_service import ScheduleRun, SchedulingService
from .task import TaskService
from .work_calendar import CalendarResolver, WorkCalendarEngine

__all__ = [
    "SchedulingEngine",
    "SchedulingConfig",
    "SchedulingService",
    "ScheduleRun",
    "ScheduleResult",
    "CPMTaskInfo",
    "EarnedValueCalculator",
    "EarnedValueMetrics",
    "TaskService",
    "WorkCalendarEngine",
    "CalendarResolver",
]
