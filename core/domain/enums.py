from __future__ import annotations

from enum import Enum


class DependencyType(str, Enum):
    FINISH_TO_START = "FS"
    FINISH_TO_FINISH = "FF"
    START_TO_START = "SS"
    START_TO_FINISH = "SF"


class TaskKind(str, Enum):
    EFFORT_DRIVEN = "EFFORT_DRIVEN"
    FIXED_DURATION = "FIXED_DURATION"
    FIXED_WORK = "FIXED_WORK"


class ResourceKind(str, Enum):
    LABOR = "LABOR"
    FLAT_COST = "FLAT_COST"


class CalendarExceptionType(str, Enum):
    WORKING = "WORKING"
    NON_WORKING = "NON_WORKING"
    HALF_DAY = "HALF_DAY"


class FindingKind(str, Enum):
    OVERALLOCATION = "OVERALLOCATION"
    NON_WORKING_SPAN = "NON_WORKING_SPAN"
    CALENDAR_FALLBACK = "CALENDAR_FALLBACK"
    DEADLINE_MISSED = "DEADLINE_MISSED"
    NEGATIVE_FLOAT = "NEGATIVE_FLOAT"


class HealthStatus(str, Enum):
    GREEN = "GREEN"
    YELLOW = "YELLOW"
    RED = "RED"


__all__ = [
    "DependencyType",
    "TaskKind",
    "ResourceKind",
    "CalendarExceptionType",
    "FindingKind",
    "HealthStatus",
]
