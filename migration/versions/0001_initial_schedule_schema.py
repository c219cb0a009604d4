"""initial scheduling schema

Revision ID: 0001
Revises:
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

_DEPENDENCY_TYPE = sa.Enum(
    "FINISH_TO_START", "FINISH_TO_FINISH", "START_TO_START", "START_TO_FINISH",
    name="dependencytype",
)
_TASK_KIND = sa.Enum("EFFORT_DRIVEN", "FIXED_DURATION", "FIXED_WORK", name="taskkind")
_RESOURCE_KIND = sa.Enum("LABOR", "FLAT_COST", name="resourcekind")
_EXCEPTION_TYPE = sa.Enum("WORKING", "NON_WORKING", "HALF_DAY", name="calendarexceptiontype")


def upgrade() -> None:
    op.create_table(
        "projects",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("currency", sa.String(length=8), nullable=True),
    )

    op.create_table(
        "working_calendars",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("working_days", sa.String(), nullable=False),
        sa.Column("hours_per_day", sa.Float(), nullable=True),
        sa.Column("day_start", sa.Time(), nullable=False),
    )

    op.create_table(
        "holidays",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column(
            "calendar_id",
            sa.String(),
            sa.ForeignKey("working_calendars.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("name", sa.String(), nullable=True),
        sa.Column("recurring", sa.Boolean(), nullable=True),
    )
    op.create_index("idx_holiday_calendar_date", "holidays", ["calendar_id", "date"])

    op.create_table(
        "calendar_exceptions",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column(
            "calendar_id",
            sa.String(),
            sa.ForeignKey("working_calendars.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("exception_type", _EXCEPTION_TYPE, nullable=False),
        sa.Column("description", sa.String(), nullable=True),
    )
    op.create_index(
        "idx_calendar_exception_calendar_date", "calendar_exceptions", ["calendar_id", "date"]
    )

    op.create_table(
        "resources",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("kind", _RESOURCE_KIND, nullable=False),
        sa.Column("bill_rate", sa.Float(), nullable=True),
        sa.Column("flat_cost", sa.Float(), nullable=True),
        sa.Column("calendar_id", sa.String(), nullable=True),
        sa.Column("availability_percent", sa.Float(), nullable=True),
    )

    op.create_table(
        "tasks",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column(
            "project_id",
            sa.String(),
            sa.ForeignKey("projects.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("position", sa.Integer(), nullable=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("kind", _TASK_KIND, nullable=False),
        sa.Column("scheduled_start", sa.Date(), nullable=True),
        sa.Column("deadline", sa.Date(), nullable=True),
        sa.Column("duration_days", sa.Float(), nullable=True),
        sa.Column("estimated_effort_hours", sa.Float(), nullable=True),
        sa.Column("work_units", sa.Float(), nullable=True),
        sa.Column("priority", sa.Integer(), nullable=True),
        sa.Column("percent_complete", sa.Float(), nullable=True),
        sa.Column("actual_start", sa.Date(), nullable=True),
        sa.Column("actual_end", sa.Date(), nullable=True),
        sa.Column("calculated_cost", sa.Float(), nullable=True),
        sa.Column("actual_cost", sa.Float(), nullable=True),
        sa.Column("is_critical_path", sa.Boolean(), nullable=True),
        sa.Column("slack_hours", sa.Float(), nullable=True),
    )
    op.create_index("idx_tasks_project_id", "tasks", ["project_id"])

    op.create_table(
        "milestones",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column(
            "project_id",
            sa.String(),
            sa.ForeignKey("projects.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("position", sa.Integer(), nullable=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("target_date", sa.Date(), nullable=True),
        sa.Column("is_critical_path", sa.Boolean(), nullable=True),
    )
    op.create_index("idx_milestones_project_id", "milestones", ["project_id"])

    op.create_table(
        "task_dependencies",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "project_id",
            sa.String(),
            sa.ForeignKey("projects.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("successor_id", sa.String(), nullable=False),
        sa.Column("predecessor_id", sa.String(), nullable=False),
        sa.Column("dependency_type", _DEPENDENCY_TYPE, nullable=False),
        sa.Column("lag_days", sa.Float(), nullable=True),
    )
    op.create_index("idx_dep_successor", "task_dependencies", ["successor_id"])
    op.create_index("idx_dep_predecessor", "task_dependencies", ["predecessor_id"])

    op.create_table(
        "task_assignments",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "task_id",
            sa.String(),
            sa.ForeignKey("tasks.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("resource_id", sa.String(), nullable=False),
        sa.Column("allocated_hours", sa.Float(), nullable=True),
        sa.Column("allocation_percent", sa.Float(), nullable=True),
    )
    op.create_index("idx_task_assignments_task", "task_assignments", ["task_id"])

    op.create_table(
        "progress_entries",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "task_id",
            sa.String(),
            sa.ForeignKey("tasks.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("recorded_at", sa.DateTime(), nullable=False),
        sa.Column("percent_complete", sa.Float(), nullable=False),
    )
    op.create_index("idx_progress_task_recorded", "progress_entries", ["task_id", "recorded_at"])


def downgrade() -> None:
    op.drop_index("idx_progress_task_recorded", table_name="progress_entries")
    op.drop_table("progress_entries")
    op.drop_index("idx_task_assignments_task", table_name="task_assignments")
    op.drop_table("task_assignments")
    op.drop_index("idx_dep_predecessor", table_name="task_dependencies")
    op.drop_index("idx_dep_successor", table_name="task_dependencies")
    op.drop_table("task_dependencies")
    op.drop_index("idx_milestones_project_id", table_name="milestones")
    op.drop_table("milestones")
    op.drop_index("idx_tasks_project_id", table_name="tasks")
    op.drop_table("tasks")
    op.drop_table("resources")
    op.drop_index("idx_calendar_exception_calendar_date", table_name="calendar_exceptions")
    op.drop_table("calendar_exceptions")
    op.drop_index("idx_holiday_calendar_date", table_name="holidays")
    op.drop_table("holidays")
    op.drop_table("working_calendars")
    op.drop_table("projects")
