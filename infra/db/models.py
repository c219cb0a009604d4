# infra/db/models.py
from __future__ import annotations
from datetime import date, datetime, time
from typing import Optional

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Enum as SAEnum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Time,
)
from sqlalchemy.orm import Mapped, mapped_column

from infra.db.base import Base
from core.models import (
    CalendarExceptionType,
    DependencyType,
    ResourceKind,
    TaskKind,
)


class ProjectORM(Base):
    __tablename__ = "projects"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str] = mapped_column(String, default="")
    start_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    currency: Mapped[Optional[str]] = mapped_column(String(8), nullable=True)  # EUR, USD, etc.


class WorkingCalendarORM(Base):
    __tablename__ = "working_calendars"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    # store working days as a comma-separated string, e.g. "0,1,2,3,4"
    working_days: Mapped[str] = mapped_column(String, nullable=False, default="0,1,2,3,4")
    hours_per_day: Mapped[float] = mapped_column(Float, default=8.0)
    day_start: Mapped[time] = mapped_column(Time, nullable=False, default=time(9, 0))


class HolidayORM(Base):
    __tablename__ = "holidays"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    calendar_id: Mapped[str] = mapped_column(
        String,
        ForeignKey("working_calendars.id", ondelete="CASCADE"),
        nullable=False,
    )
    date: Mapped[date] = mapped_column(Date, nullable=False)
    name: Mapped[str] = mapped_column(String, default="")
    recurring: Mapped[bool] = mapped_column(Boolean, default=False)

Index("idx_holiday_calendar_date", HolidayORM.calendar_id, HolidayORM.date)


class CalendarExceptionORM(Base):
    __tablename__ = "calendar_exceptions"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    calendar_id: Mapped[str] = mapped_column(
        String,
        ForeignKey("working_calendars.id", ondelete="CASCADE"),
        nullable=False,
    )
    date: Mapped[date] = mapped_column(Date, nullable=False)
    exception_type: Mapped[CalendarExceptionType] = mapped_column(
        SAEnum(CalendarExceptionType), nullable=False
    )
    description: Mapped[str] = mapped_column(String, default="")

Index("idx_calendar_exception_calendar_date", CalendarExceptionORM.calendar_id, CalendarExceptionORM.date)


class ResourceORM(Base):
    __tablename__ = "resources"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    kind: Mapped[ResourceKind] = mapped_column(
        SAEnum(ResourceKind), default=ResourceKind.LABOR, nullable=False
    )
    bill_rate: Mapped[float] = mapped_column(Float, default=0.0)
    flat_cost: Mapped[float] = mapped_column(Float, default=0.0)
    # no FK: a dangling calendar reference falls back to the default calendar
    calendar_id: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    availability_percent: Mapped[float] = mapped_column(Float, default=100.0)


class TaskORM(Base):
    __tablename__ = "tasks"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    project_id: Mapped[str] = mapped_column(
        String,
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
    )
    position: Mapped[int] = mapped_column(Integer, default=0)
    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str] = mapped_column(String, default="")
    kind: Mapped[TaskKind] = mapped_column(
        SAEnum(TaskKind), default=TaskKind.FIXED_DURATION, nullable=False
    )
    scheduled_start: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    deadline: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    duration_days: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    estimated_effort_hours: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    work_units: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    priority: Mapped[int] = mapped_column(Integer, default=50)

    percent_complete: Mapped[float] = mapped_column(Float, default=0.0)
    actual_start: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    actual_end: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    calculated_cost: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    actual_cost: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    is_critical_path: Mapped[bool] = mapped_column(Boolean, default=False)
    slack_hours: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

Index("idx_tasks_project_id", TaskORM.project_id)


class MilestoneORM(Base):
    __tablename__ = "milestones"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    project_id: Mapped[str] = mapped_column(
        String,
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
    )
    position: Mapped[int] = mapped_column(Integer, default=0)
    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str] = mapped_column(String, default="")
    target_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    is_critical_path: Mapped[bool] = mapped_column(Boolean, default=False)

Index("idx_milestones_project_id", MilestoneORM.project_id)


class TaskDependencyORM(Base):
    """
    Dependency owned by a task or milestone (`successor_id`). The predecessor is
    a weak reference resolved against the project snapshot, hence no FK.
    """

    __tablename__ = "task_dependencies"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    project_id: Mapped[str] = mapped_column(
        String,
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
    )
    successor_id: Mapped[str] = mapped_column(String, nullable=False)
    predecessor_id: Mapped[str] = mapped_column(String, nullable=False)
    dependency_type: Mapped[DependencyType] = mapped_column(
        SAEnum(DependencyType), default=DependencyType.FINISH_TO_START, nullable=False
    )
    lag_days: Mapped[float] = mapped_column(Float, default=0.0)

Index("idx_dep_successor", TaskDependencyORM.successor_id)
Index("idx_dep_predecessor", TaskDependencyORM.predecessor_id)


class TaskAssignmentORM(Base):
    __tablename__ = "task_assignments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    task_id: Mapped[str] = mapped_column(String, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False)
    resource_id: Mapped[str] = mapped_column(String, nullable=False)
    allocated_hours: Mapped[float] = mapped_column(Float, default=0.0)
    allocation_percent: Mapped[float] = mapped_column(Float, default=100.0)

Index("idx_task_assignments_task", TaskAssignmentORM.task_id)


class ProgressEntryORM(Base):
    __tablename__ = "progress_entries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    task_id: Mapped[str] = mapped_column(String, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False)
    recorded_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    percent_complete: Mapped[float] = mapped_column(Float, nullable=False)

Index("idx_progress_task_recorded", ProgressEntryORM.task_id, ProgressEntryORM.recorded_at)
