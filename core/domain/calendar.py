from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, time
from typing import FrozenSet, Optional, Tuple

from core.domain.enums import CalendarExceptionType
from core.domain.identifiers import generate_id
from core.exceptions import ValidationError


@dataclass(frozen=True)
class Holiday:
    date: date
    name: str = ""
    recurring: bool = False

    def matches(self, day: date) -> bool:
        if self.recurring:
            return (self.date.month, self.date.day) == (day.month, day.day)
        return self.date == day


@dataclass(frozen=True)
class CalendarException:
    """A one-day override of the weekly pattern."""

    date: date
    exception_type: CalendarExceptionType
    description: str = ""


@dataclass(frozen=True)
class WorkingCalendar:
    id: str
    name: str = "Default"
    # 0=Monday, 6=Sunday
    working_days: FrozenSet[int] = field(default_factory=lambda: frozenset({0, 1, 2, 3, 4}))
    hours_per_day: float = 8.0
    day_start: time = time(9, 0)
    holidays: Tuple[Holiday, ...] = ()
    exceptions: Tuple[CalendarException, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "working_days", frozenset(self.working_days))
        object.__setattr__(self, "holidays", tuple(self.holidays))
        object.__setattr__(self, "exceptions", tuple(self.exceptions))

    def validate(self) -> None:
        if not self.working_days:
            raise ValidationError(
                f"Calendar '{self.name}' has no working days.",
                code="CALENDAR_NO_WORKING_DAYS",
            )
        if any(d < 0 or d > 6 for d in self.working_days):
            raise ValidationError(
                "working_days must hold weekday indexes 0..6.",
                code="CALENDAR_INVALID_WEEKDAY",
            )
        day_start_hours = self.day_start.hour + self.day_start.minute / 60.0
        if self.hours_per_day <= 0 or day_start_hours + self.hours_per_day > 24.0:
            raise ValidationError(
                "hours_per_day must be positive and fit inside a single day.",
                code="CALENDAR_INVALID_HOURS",
            )

    @staticmethod
    def create(
        name: str,
        working_days: Optional[set[int]] = None,
        hours_per_day: float = 8.0,
        day_start: time = time(9, 0),
        holidays: tuple[Holiday, ...] = (),
    ) -> "WorkingCalendar":
        return WorkingCalendar(
            id=generate_id(),
            name=name,
            working_days=frozenset(working_days if working_days is not None else {0, 1, 2, 3, 4}),
            hours_per_day=hours_per_day,
            day_start=day_start,
            holidays=tuple(holidays),
        )

    @staticmethod
    def create_default() -> "WorkingCalendar":
        return WorkingCalendar(id="default", name="Default")


__all__ = ["Holiday", "CalendarException", "WorkingCalendar"]
