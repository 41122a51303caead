from __future__ import annotations

import datetime as dt
import enum
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase):
    pass


class SourceType(str, enum.Enum):
    TEMPLATE = "TEMPLATE"
    CUSTOM = "CUSTOM"


class AssignmentStatus(str, enum.Enum):
    UPCOMING = "UPCOMING"
    COMPLETED = "COMPLETED"


RECURRING_FREQUENCIES = ("weekly", "2x_per_week")


# -- Collaborator tables (identity mirror, roster, exercise library) --


class User(Base):
    __tablename__ = "users"
    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    email: Mapped[str | None] = mapped_column(String(255))
    first_name: Mapped[str | None] = mapped_column(String(100))
    last_name: Mapped[str | None] = mapped_column(String(100))
    role: Mapped[str] = mapped_column(String(20), default="athlete")
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=utcnow)


class AthleteGroup(Base):
    __tablename__ = "athlete_groups"
    id: Mapped[int] = mapped_column(primary_key=True)
    coach_id: Mapped[str] = mapped_column(String(64), index=True)
    name: Mapped[str] = mapped_column(String(120))
    members: Mapped[list["AthleteGroupMember"]] = relationship(
        back_populates="group", cascade="all, delete-orphan", order_by="AthleteGroupMember.id"
    )


class AthleteGroupMember(Base):
    __tablename__ = "athlete_group_members"
    id: Mapped[int] = mapped_column(primary_key=True)
    group_id: Mapped[int] = mapped_column(ForeignKey("athlete_groups.id", ondelete="CASCADE"), index=True)
    athlete_id: Mapped[str] = mapped_column(String(64), index=True)
    group: Mapped[AthleteGroup] = relationship(back_populates="members")
    __table_args__ = (UniqueConstraint("group_id", "athlete_id", name="uq_group_member"),)


class Exercise(Base):
    __tablename__ = "exercises"
    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(160), index=True)
    category: Mapped[str] = mapped_column(String(60))
    instructions: Mapped[str | None] = mapped_column(Text)
    video_url: Mapped[str | None] = mapped_column(String(500))


# -- Workout sources: templates (shared) and custom workouts (coach-owned) --


class WorkoutTemplate(Base):
    __tablename__ = "workout_templates"
    id: Mapped[int] = mapped_column(primary_key=True)
    title: Mapped[str] = mapped_column(String(200))
    description: Mapped[str | None] = mapped_column(Text)
    tags: Mapped[list[str]] = mapped_column(JSON, default=list)
    difficulty: Mapped[str | None] = mapped_column(String(40))
    equipment: Mapped[list[str]] = mapped_column(JSON, default=list)
    estimated_duration: Mapped[int | None] = mapped_column(Integer)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=utcnow)
    blocks: Mapped[list["TemplateBlock"]] = relationship(
        back_populates="workout",
        cascade="all, delete-orphan",
        order_by=lambda: [TemplateBlock.order, TemplateBlock.id],
    )


class TemplateBlock(Base):
    __tablename__ = "template_blocks"
    id: Mapped[int] = mapped_column(primary_key=True)
    template_id: Mapped[int] = mapped_column(ForeignKey("workout_templates.id", ondelete="CASCADE"), index=True)
    title: Mapped[str] = mapped_column(String(200))
    order: Mapped[int] = mapped_column(Integer, default=0)
    workout: Mapped[WorkoutTemplate] = relationship(back_populates="blocks")
    exercises: Mapped[list["TemplateExercise"]] = relationship(
        back_populates="block",
        cascade="all, delete-orphan",
        order_by=lambda: [TemplateExercise.order, TemplateExercise.id],
    )


class TemplateExercise(Base):
    __tablename__ = "template_exercises"
    id: Mapped[int] = mapped_column(primary_key=True)
    block_id: Mapped[int] = mapped_column(ForeignKey("template_blocks.id", ondelete="CASCADE"), index=True)
    name: Mapped[str] = mapped_column(String(200))
    # Weak reference into the exercise library: lookup only, no constraint.
    exercise_id: Mapped[int | None] = mapped_column(Integer)
    order: Mapped[int] = mapped_column(Integer, default=0)
    prescription_json: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    notes: Mapped[str | None] = mapped_column(Text)
    block: Mapped[TemplateBlock] = relationship(back_populates="exercises")


class CustomWorkout(Base):
    __tablename__ = "custom_workouts"
    id: Mapped[int] = mapped_column(primary_key=True)
    coach_id: Mapped[str] = mapped_column(String(64), index=True)
    # Clone provenance, informational only.
    source_template_id: Mapped[int | None] = mapped_column(Integer)
    title: Mapped[str] = mapped_column(String(200))
    description: Mapped[str | None] = mapped_column(Text)
    tags: Mapped[list[str]] = mapped_column(JSON, default=list)
    difficulty: Mapped[str | None] = mapped_column(String(40))
    equipment: Mapped[list[str]] = mapped_column(JSON, default=list)
    estimated_duration: Mapped[int | None] = mapped_column(Integer)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[dt.datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)
    blocks: Mapped[list["CustomBlock"]] = relationship(
        back_populates="workout",
        cascade="all, delete-orphan",
        order_by=lambda: [CustomBlock.order, CustomBlock.id],
    )


class CustomBlock(Base):
    __tablename__ = "custom_blocks"
    id: Mapped[int] = mapped_column(primary_key=True)
    workout_id: Mapped[int] = mapped_column(ForeignKey("custom_workouts.id", ondelete="CASCADE"), index=True)
    title: Mapped[str] = mapped_column(String(200))
    order: Mapped[int] = mapped_column(Integer, default=0)
    workout: Mapped[CustomWorkout] = relationship(back_populates="blocks")
    exercises: Mapped[list["CustomExercise"]] = relationship(
        back_populates="block",
        cascade="all, delete-orphan",
        order_by=lambda: [CustomExercise.order, CustomExercise.id],
    )


class CustomExercise(Base):
    __tablename__ = "custom_exercises"
    id: Mapped[int] = mapped_column(primary_key=True)
    block_id: Mapped[int] = mapped_column(ForeignKey("custom_blocks.id", ondelete="CASCADE"), index=True)
    name: Mapped[str] = mapped_column(String(200))
    exercise_id: Mapped[int | None] = mapped_column(Integer)
    order: Mapped[int] = mapped_column(Integer, default=0)
    prescription_json: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    notes: Mapped[str | None] = mapped_column(Text)
    block: Mapped[CustomBlock] = relationship(back_populates="exercises")


# -- Scheduling --


class Assignment(Base):
    __tablename__ = "assignments"
    id: Mapped[int] = mapped_column(primary_key=True)
    athlete_id: Mapped[str] = mapped_column(String(64), index=True)
    coach_id: Mapped[str] = mapped_column(String(64), index=True)
    source_type: Mapped[str] = mapped_column(String(16))
    # Polymorphic reference resolved by source_type; no FK across the two tables.
    source_id: Mapped[int] = mapped_column(Integer)
    scheduled_date: Mapped[dt.date] = mapped_column(Date, index=True)
    status: Mapped[str] = mapped_column(String(16), default=AssignmentStatus.UPCOMING.value)
    recurring_id: Mapped[int | None] = mapped_column(ForeignKey("recurring_assignments.id"), index=True)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=utcnow)
    __table_args__ = (
        CheckConstraint("source_type in ('TEMPLATE', 'CUSTOM')", name="ck_assignment_source_type"),
        CheckConstraint("status in ('UPCOMING', 'COMPLETED')", name="ck_assignment_status"),
        Index("ix_assignments_source", "source_type", "source_id"),
    )


class RecurringAssignment(Base):
    __tablename__ = "recurring_assignments"
    id: Mapped[int] = mapped_column(primary_key=True)
    coach_id: Mapped[str] = mapped_column(String(64), index=True)
    source_type: Mapped[str] = mapped_column(String(16))
    source_id: Mapped[int] = mapped_column(Integer)
    athlete_ids: Mapped[list[str] | None] = mapped_column(JSON(none_as_null=True))
    group_id: Mapped[int | None] = mapped_column(Integer)
    frequency: Mapped[str] = mapped_column(String(20), default="weekly")
    days_of_week: Mapped[list[int]] = mapped_column(JSON)
    start_date: Mapped[dt.date] = mapped_column(Date)
    end_date: Mapped[dt.date] = mapped_column(Date)
    active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=utcnow)
    __table_args__ = (
        CheckConstraint("end_date >= start_date", name="ck_recurring_date_range"),
        CheckConstraint(
            "(athlete_ids IS NULL) <> (group_id IS NULL)",
            name="ck_recurring_single_target",
        ),
    )


# -- Logging --


class WorkoutLog(Base):
    __tablename__ = "workout_logs"
    id: Mapped[int] = mapped_column(primary_key=True)
    assignment_id: Mapped[int] = mapped_column(ForeignKey("assignments.id"), unique=True)
    athlete_id: Mapped[str] = mapped_column(String(64), index=True)
    overall_notes: Mapped[str | None] = mapped_column(Text)
    avg_heart_rate: Mapped[int | None] = mapped_column(Integer)
    max_heart_rate: Mapped[int | None] = mapped_column(Integer)
    min_heart_rate: Mapped[int | None] = mapped_column(Integer)
    device_name: Mapped[str | None] = mapped_column(String(120))
    completed_at: Mapped[dt.datetime | None] = mapped_column(DateTime)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[dt.datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)
    sets: Mapped[list["SetLog"]] = relationship(
        back_populates="log", cascade="all, delete-orphan", order_by="SetLog.id"
    )


class SetLog(Base):
    __tablename__ = "set_logs"
    id: Mapped[int] = mapped_column(primary_key=True)
    log_id: Mapped[int] = mapped_column(ForeignKey("workout_logs.id", ondelete="CASCADE"), index=True)
    # Matched to the source by name, never by id.
    exercise_name: Mapped[str] = mapped_column(String(200))
    set_number: Mapped[int] = mapped_column(Integer)
    reps: Mapped[int | None] = mapped_column(Integer)
    weight: Mapped[str | None] = mapped_column(String(60))
    time_seconds: Mapped[int | None] = mapped_column(Integer)
    distance_meters: Mapped[int | None] = mapped_column(Integer)
    rpe: Mapped[int | None] = mapped_column(Integer)
    notes: Mapped[str | None] = mapped_column(Text)
    log: Mapped[WorkoutLog] = relationship(back_populates="sets")
