from .engine import WorkCalendarEngine, date_after_working_hours, working_hours_between
from .resolver import CalendarResolver

__all__ = [
    "WorkCalendarEngine",
    "CalendarResolver",
    "date_after_working_hours",
    "working_hours_between",
]
