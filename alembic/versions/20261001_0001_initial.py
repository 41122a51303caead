"""initial assignment and logging schema"""

from alembic import op
import sqlalchemy as sa


revision = "20261001_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=64), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("first_name", sa.String(length=100), nullable=True),
        sa.Column("last_name", sa.String(length=100), nullable=True),
        sa.Column("role", sa.String(length=20), nullable=False, server_default="athlete"),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
    )

    op.create_table(
        "athlete_groups",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("coach_id", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False),
    )
    op.create_index("ix_athlete_groups_coach_id", "athlete_groups", ["coach_id"])

    op.create_table(
        "athlete_group_members",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("group_id", sa.Integer(), sa.ForeignKey("athlete_groups.id", ondelete="CASCADE"), nullable=False),
        sa.Column("athlete_id", sa.String(length=64), nullable=False),
        sa.UniqueConstraint("group_id", "athlete_id", name="uq_group_member"),
    )
    op.create_index("ix_athlete_group_members_group_id", "athlete_group_members", ["group_id"])
    op.create_index("ix_athlete_group_members_athlete_id", "athlete_group_members", ["athlete_id"])

    op.create_table(
        "exercises",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=160), nullable=False),
        sa.Column("category", sa.String(length=60), nullable=False),
        sa.Column("instructions", sa.Text(), nullable=True),
        sa.Column("video_url", sa.String(length=500), nullable=True),
    )
    op.create_index("ix_exercises_name", "exercises", ["name"])

    op.create_table(
        "workout_templates",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column("difficulty", sa.String(length=40), nullable=True),
        sa.Column("equipment", sa.JSON(), nullable=False),
        sa.Column("estimated_duration", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
    )

    op.create_table(
        "template_blocks",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("template_id", sa.Integer(), sa.ForeignKey("workout_templates.id", ondelete="CASCADE"), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("order", sa.Integer(), nullable=False, server_default="0"),
    )
    op.create_index("ix_template_blocks_template_id", "template_blocks", ["template_id"])

    op.create_table(
        "template_exercises",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("block_id", sa.Integer(), sa.ForeignKey("template_blocks.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("exercise_id", sa.Integer(), nullable=True),
        sa.Column("order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("prescription_json", sa.JSON(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
    )
    op.create_index("ix_template_exercises_block_id", "template_exercises", ["block_id"])

    op.create_table(
        "custom_workouts",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("coach_id", sa.String(length=64), nullable=False),
        sa.Column("source_template_id", sa.Integer(), nullable=True),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column("difficulty", sa.String(length=40), nullable=True),
        sa.Column("equipment", sa.JSON(), nullable=False),
        sa.Column("estimated_duration", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
    )
    op.create_index("ix_custom_workouts_coach_id", "custom_workouts", ["coach_id"])

    op.create_table(
        "custom_blocks",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("workout_id", sa.Integer(), sa.ForeignKey("custom_workouts.id", ondelete="CASCADE"), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("order", sa.Integer(), nullable=False, server_default="0"),
    )
    op.create_index("ix_custom_blocks_workout_id", "custom_blocks", ["workout_id"])

    op.create_table(
        "custom_exercises",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("block_id", sa.Integer(), sa.ForeignKey("custom_blocks.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("exercise_id", sa.Integer(), nullable=True),
        sa.Column("order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("prescription_json", sa.JSON(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
    )
    op.create_index("ix_custom_exercises_block_id", "custom_exercises", ["block_id"])

    op.create_table(
        "recurring_assignments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("coach_id", sa.String(length=64), nullable=False),
        sa.Column("source_type", sa.String(length=16), nullable=False),
        sa.Column("source_id", sa.Integer(), nullable=False),
        sa.Column("athlete_ids", sa.JSON(none_as_null=True), nullable=True),
        sa.Column("group_id", sa.Integer(), nullable=True),
        sa.Column("frequency", sa.String(length=20), nullable=False, server_default="weekly"),
        sa.Column("days_of_week", sa.JSON(), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.CheckConstraint("end_date >= start_date", name="ck_recurring_date_range"),
        sa.CheckConstraint("(athlete_ids IS NULL) <> (group_id IS NULL)", name="ck_recurring_single_target"),
    )
    op.create_index("ix_recurring_assignments_coach_id", "recurring_assignments", ["coach_id"])

    op.create_table(
        "assignments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("athlete_id", sa.String(length=64), nullable=False),
        sa.Column("coach_id", sa.String(length=64), nullable=False),
        sa.Column("source_type", sa.String(length=16), nullable=False),
        sa.Column("source_id", sa.Integer(), nullable=False),
        sa.Column("scheduled_date", sa.Date(), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="UPCOMING"),
        sa.Column("recurring_id", sa.Integer(), sa.ForeignKey("recurring_assignments.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.CheckConstraint("source_type in ('TEMPLATE', 'CUSTOM')", name="ck_assignment_source_type"),
        sa.CheckConstraint("status in ('UPCOMING', 'COMPLETED')", name="ck_assignment_status"),
    )
    op.create_index("ix_assignments_athlete_id", "assignments", ["athlete_id"])
    op.create_index("ix_assignments_coach_id", "assignments", ["coach_id"])
    op.create_index("ix_assignments_scheduled_date", "assignments", ["scheduled_date"])
    op.create_index("ix_assignments_recurring_id", "assignments", ["recurring_id"])
    op.create_index("ix_assignments_source", "assignments", ["source_type", "source_id"])

    op.create_table(
        "workout_logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("assignment_id", sa.Integer(), sa.ForeignKey("assignments.id"), nullable=False, unique=True),
        sa.Column("athlete_id", sa.String(length=64), nullable=False),
        sa.Column("overall_notes", sa.Text(), nullable=True),
        sa.Column("avg_heart_rate", sa.Integer(), nullable=True),
        sa.Column("max_heart_rate", sa.Integer(), nullable=True),
        sa.Column("min_heart_rate", sa.Integer(), nullable=True),
        sa.Column("device_name", sa.String(length=120), nullable=True),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
    )
    op.create_index("ix_workout_logs_athlete_id", "workout_logs", ["athlete_id"])

    op.create_table(
        "set_logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("log_id", sa.Integer(), sa.ForeignKey("workout_logs.id", ondelete="CASCADE"), nullable=False),
        sa.Column("exercise_name", sa.String(length=200), nullable=False),
        sa.Column("set_number", sa.Integer(), nullable=False),
        sa.Column("reps", sa.Integer(), nullable=True),
        sa.Column("weight", sa.String(length=60), nullable=True),
        sa.Column("time_seconds", sa.Integer(), nullable=True),
        sa.Column("distance_meters", sa.Integer(), nullable=True),
        sa.Column("rpe", sa.Integer(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
    )
    op.create_index("ix_set_logs_log_id", "set_logs", ["log_id"])


def downgrade() -> None:
    for table in (
        "set_logs",
        "workout_logs",
        "assignments",
        "recurring_assignments",
        "custom_exercises",
        "custom_blocks",
        "custom_workouts",
        "template_exercises",
        "template_blocks",
        "workout_templates",
        "exercises",
        "athlete_group_members",
        "athlete_groups",
        "users",
    ):
        op.drop_table(table)
