from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import time

from core.domain.calendar import WorkingCalendar
from core.exceptions import ValidationError


@dataclass(frozen=True)
class SchedulingConfig:
    """Explicit inputs of a scheduling run that do not come from the snapshot."""

    default_calendar: WorkingCalendar = field(default_factory=WorkingCalendar.create_default)
    buffer_percent: float = 0.0
    overallocation_tolerance_hours: float = 1e-9

    @staticmethod
    def from_env() -> "SchedulingConfig":
        base = WorkingCalendar.create_default()

        hours_raw = (os.getenv("PM_DEFAULT_HOURS_PER_DAY") or "").strip()
        days_raw = (os.getenv("PM_DEFAULT_WORKING_DAYS") or "").strip()
        start_raw = (os.getenv("PM_DEFAULT_DAY_START") or "").strip()
        buffer_raw = (os.getenv("PM_SCHEDULE_BUFFER_PERCENT") or "").strip()

        try:
            hours_per_day = float(hours_raw) if hours_raw else base.hours_per_day
            working_days = (
                frozenset(int(part) for part in days_raw.split(",") if part.strip())
                if days_raw
                else base.working_days
            )
            day_start = time.fromisoformat(start_raw) if start_raw else base.day_start
            buffer_percent = float(buffer_raw) if buffer_raw else 0.0
        except ValueError as exc:
            raise ValidationError(
                f"Invalid scheduling configuration in environment: {exc}",
                code="SCHEDULE_CONFIG_INVALID",
            ) from exc

        if buffer_percent < 0:
            raise ValidationError(
                "PM_SCHEDULE_BUFFER_PERCENT cannot be negative.",
                code="SCHEDULE_CONFIG_INVALID",
            )

        calendar = WorkingCalendar(
            id=base.id,
            name=base.name,
            working_days=working_days,
            hours_per_day=hours_per_day,
            day_start=day_start,
        )
        calendar.validate()
        return SchedulingConfig(default_calendar=calendar, buffer_percent=buffer_percent)


__all__ = ["SchedulingConfig"]
