# core/services/work_calendar/engine.py
from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Optional, Union

from core.domain.calendar import WorkingCalendar
from core.domain.enums import CalendarExceptionType
from core.exceptions import ValidationError

Instant = Union[date, datetime]

# Longest run of days without working time a lookup may walk before giving up.
MAX_SCAN_DAYS = 3660

_ZERO = timedelta(0)


def hours_to_minutes(hours: float) -> int:
    return int(round(hours * 60.0))


class WorkCalendarEngine:
    """
    Working-time arithmetic over one WorkingCalendar.

    Every working day is a single window [day_start, day_start + hours_per_day).
    All arithmetic is done in whole minutes so that adding hours and measuring
    them back always agree.
    """

    def __init__(self, calendar: WorkingCalendar):
        self._calendar: WorkingCalendar = calendar
        self._day_minutes: int = hours_to_minutes(calendar.hours_per_day)

    @property
    def calendar(self) -> WorkingCalendar:
        return self._calendar

    @property
    def hours_per_day(self) -> float:
        return self._calendar.hours_per_day

    # ---------------- day level ----------------

    def _exception_for(self, d: date) -> Optional[CalendarExceptionType]:
        for exc in self._calendar.exceptions:
            if exc.date == d:
                return exc.exception_type
        return None

    def is_holiday(self, d: date) -> bool:
        return any(h.matches(d) for h in self._calendar.holidays)

    def is_working_day(self, d: date) -> bool:
        override = self._exception_for(d)
        if override is not None:
            return override != CalendarExceptionType.NON_WORKING
        if d.weekday() not in self._calendar.working_days:
            return False
        return not self.is_holiday(d)

    def working_minutes_on(self, d: date) -> int:
        if not self.is_working_day(d):
            return 0
        if self._exception_for(d) == CalendarExceptionType.HALF_DAY:
            return self._day_minutes // 2
        return self._day_minutes

    def working_hours_on(self, d: date) -> float:
        return self.working_minutes_on(d) / 60.0

    def next_working_day(self, d: date, include_today: bool = True) -> date:
        current = d if include_today else d + timedelta(days=1)
        for _ in range(MAX_SCAN_DAYS):
            if self.is_working_day(current):
                return current
            current += timedelta(days=1)
        raise self._no_working_time(d)

    def previous_working_day(self, d: date, include_today: bool = True) -> date:
        current = d if include_today else d - timedelta(days=1)
        for _ in range(MAX_SCAN_DAYS):
            if self.is_working_day(current):
                return current
            current -= timedelta(days=1)
        raise self._no_working_time(d)

    def add_working_days(self, start: date, working_days: int) -> date:
        """
        Date of the n-th working day counted inclusively from `start`
        (`start` itself counts when it is a working day). Negative values walk back.
        """
        if working_days == 0:
            return start

        if working_days > 0:
            current = self.next_working_day(start, include_today=True)
            days_remaining = working_days - 1
            while days_remaining > 0:
                current += timedelta(days=1)
                if self.is_working_day(current):
                    days_remaining -= 1
            return current

        days_remaining = -working_days
        current = self.next_working_day(start, include_today=True)
        while days_remaining > 0:
            current -= timedelta(days=1)
            if self.is_working_day(current):
                days_remaining -= 1
        return current

    def working_days_between(self, start: date, end: date) -> int:
        """Working days in the closed range [start, end]."""
        if end < start:
            return 0
        current = start
        count = 0
        while current <= end:
            if self.is_working_day(current):
                count += 1
            current += timedelta(days=1)
        return count

    def has_working_time(self, start: date, end: date) -> bool:
        current = start
        while current <= end:
            if self.working_minutes_on(current) > 0:
                return True
            current += timedelta(days=1)
        return False

    # ---------------- instant level ----------------

    def to_instant(self, value: Instant) -> datetime:
        if isinstance(value, datetime):
            return value
        return datetime.combine(value, self._calendar.day_start)

    def window(self, d: date) -> tuple[datetime, datetime]:
        opens = datetime.combine(d, self._calendar.day_start)
        return opens, opens + timedelta(minutes=self.working_minutes_on(d))

    def snap_to_working_start(self, value: Instant) -> datetime:
        """Earliest instant >= value at which work can actually be performed."""
        instant = self.to_instant(value)
        day = instant.date()
        for _ in range(MAX_SCAN_DAYS):
            opens, closes = self.window(day)
            if closes > opens and instant < closes:
                return max(instant, opens)
            day += timedelta(days=1)
        raise self._no_working_time(instant.date())

    def add_working_hours(self, start: Instant, hours: float) -> datetime:
        """
        Instant reached by consuming `hours` of working time from `start`.
        A finish that lands exactly on the end of a working day stays there
        (it is not rolled forward to the next morning). Negative hours walk
        backwards.
        """
        minutes = hours_to_minutes(hours)
        instant = self.to_instant(start)
        if minutes == 0:
            return instant
        if minutes < 0:
            return self._consume_backward(instant, timedelta(minutes=-minutes))
        return self._consume_forward(instant, timedelta(minutes=minutes))

    def subtract_working_hours(self, end: Instant, hours: float) -> datetime:
        return self.add_working_hours(end, -hours)

    def working_hours_between(self, start: Instant, end: Instant) -> float:
        """Signed working hours from `start` to `end`."""
        a = self.to_instant(start)
        b = self.to_instant(end)
        if b < a:
            return -self._elapsed(b, a).total_seconds() / 3600.0
        return self._elapsed(a, b).total_seconds() / 3600.0

    def _elapsed(self, start: datetime, end: datetime) -> timedelta:
        total = _ZERO
        day = start.date()
        while day <= end.date():
            opens, closes = self.window(day)
            lo = max(opens, start)
            hi = min(closes, end)
            if hi > lo:
                total += hi - lo
            day += timedelta(days=1)
        return total

    def _consume_forward(self, start: datetime, remaining: timedelta) -> datetime:
        day = start.date()
        idle_days = 0
        while idle_days < MAX_SCAN_DAYS:
            opens, closes = self.window(day)
            begin = max(opens, start)
            if closes > begin:
                idle_days = 0
                available = closes - begin
                if remaining <= available:
                    return begin + remaining
                remaining -= available
            else:
                idle_days += 1
            day += timedelta(days=1)
        raise self._no_working_time(start.date())

    def _consume_backward(self, end: datetime, remaining: timedelta) -> datetime:
        day = end.date()
        idle_days = 0
        while idle_days < MAX_SCAN_DAYS:
            opens, closes = self.window(day)
            finish = min(closes, end)
            if finish > opens:
                idle_days = 0
                available = finish - opens
                if remaining <= available:
                    return finish - remaining
                remaining -= available
            else:
                idle_days += 1
            day -= timedelta(days=1)
        raise self._no_working_time(end.date())

    def _no_working_time(self, near: date) -> ValidationError:
        return ValidationError(
            f"Calendar '{self._calendar.name}' has no working time near {near.isoformat()}.",
            code="CALENDAR_NO_WORKING_TIME",
        )


def date_after_working_hours(calendar: WorkingCalendar, start: Instant, hours: float) -> datetime:
    return WorkCalendarEngine(calendar).add_working_hours(start, hours)


def working_hours_between(calendar: WorkingCalendar, start: Instant, end: Instant) -> float:
    return WorkCalendarEngine(calendar).working_hours_between(start, end)


__all__ = [
    "WorkCalendarEngine",
    "date_after_working_hours",
    "working_hours_between",
    "hours_to_minutes",
    "MAX_SCAN_DAYS",
]
