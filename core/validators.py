"""Pydantic validation models for all user-facing data entry points.

Shape and range checks live here. Rules that need the database or that
the services must enforce on their own (target exclusivity, weekday
range, date range) are checked again in the services and raise
``core.errors.ValidationError``.
"""

from __future__ import annotations

from datetime import date
from typing import Annotated, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from core.models import SourceType

# Matches the String(64) user id columns.
AthleteId = Annotated[str, Field(min_length=1, max_length=64)]


def _clean_label_set(values: list[str]) -> list[str]:
    seen: set[str] = set()
    out: list[str] = []
    for raw in values or []:
        label = str(raw or "").strip()
        if not label or label.lower() in seen:
            continue
        seen.add(label.lower())
        out.append(label)
    return out


class PrescriptionInput(BaseModel):
    sets: Optional[int] = Field(default=None, ge=1, le=100)
    reps: Optional[str] = Field(default=None, max_length=40)
    weight: Optional[str] = Field(default=None, max_length=80)

    def as_json(self) -> dict:
        return self.model_dump(exclude_none=True)


class ExerciseEntryInput(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    exercise_id: Optional[int] = Field(default=None, gt=0)
    order: int = Field(default=0, ge=0)
    prescription: PrescriptionInput = Field(default_factory=PrescriptionInput)
    notes: Optional[str] = Field(default=None, max_length=2000)


class BlockInput(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    order: int = Field(default=0, ge=0)
    exercises: list[ExerciseEntryInput] = Field(default_factory=list)


class CustomWorkoutInput(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=4000)
    tags: list[str] = Field(default_factory=list)
    difficulty: Optional[str] = Field(default=None, max_length=40)
    equipment: list[str] = Field(default_factory=list)
    estimated_duration: Optional[int] = Field(default=None, ge=1, le=600)
    blocks: list[BlockInput] = Field(default_factory=list)

    @field_validator("tags", "equipment")
    @classmethod
    def dedupe_labels(cls, v):
        return _clean_label_set(v)

    @field_validator("title")
    @classmethod
    def strip_title(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("title must not be blank")
        return v


class AssignInput(BaseModel):
    source_type: SourceType
    source_id: int = Field(gt=0)
    scheduled_date: date
    athlete_ids: Optional[list[AthleteId]] = None
    group_id: Optional[int] = Field(default=None, gt=0)


class RecurringAssignInput(BaseModel):
    source_type: SourceType
    source_id: int = Field(gt=0)
    frequency: Literal["weekly", "2x_per_week"] = "weekly"
    days_of_week: list[int] = Field(min_length=1, max_length=7)
    start_date: date
    end_date: date
    athlete_ids: Optional[list[AthleteId]] = None
    group_id: Optional[int] = Field(default=None, gt=0)

    @field_validator("days_of_week")
    @classmethod
    def valid_weekdays(cls, v):
        bad = [d for d in v if d < 0 or d > 6]
        if bad:
            raise ValueError(f"days_of_week must be within 0-6 (Sunday=0), got {bad}")
        return sorted(set(v))


class SetLogInput(BaseModel):
    exercise_name: str = Field(min_length=1, max_length=200)
    set_number: int = Field(ge=1, le=200)
    reps: Optional[int] = Field(default=None, ge=0, le=1000)
    weight: Optional[str] = Field(default=None, max_length=60)
    time_seconds: Optional[int] = Field(default=None, ge=0)
    distance_meters: Optional[int] = Field(default=None, ge=0)
    rpe: Optional[int] = Field(default=None, ge=1, le=10)
    notes: Optional[str] = Field(default=None, max_length=2000)


class HeartRateInput(BaseModel):
    avg_heart_rate: Optional[int] = Field(default=None, ge=20, le=250)
    max_heart_rate: Optional[int] = Field(default=None, ge=20, le=250)
    min_heart_rate: Optional[int] = Field(default=None, ge=20, le=250)
    device_name: Optional[str] = Field(default=None, max_length=120)

    @model_validator(mode="after")
    def ordered_bounds(self):
        lo, avg, hi = self.min_heart_rate, self.avg_heart_rate, self.max_heart_rate
        if lo is not None and hi is not None and lo > hi:
            raise ValueError("min_heart_rate must be <= max_heart_rate")
        if avg is not None and hi is not None and avg > hi:
            raise ValueError("avg_heart_rate must be <= max_heart_rate")
        if avg is not None and lo is not None and avg < lo:
            raise ValueError("avg_heart_rate must be >= min_heart_rate")
        return self


class SaveProgressInput(BaseModel):
    overall_notes: Optional[str] = Field(default=None, max_length=4000)
    sets: list[SetLogInput] = Field(default_factory=list)
    heart_rate: Optional[HeartRateInput] = None
