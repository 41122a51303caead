from __future__ import annotations

from datetime import date as dt_date
from datetime import datetime as dt_datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from core.models import SourceType


class ErrorDetail(BaseModel):
    code: str
    message: str


class ErrorResponse(BaseModel):
    detail: ErrorDetail


class HealthResponse(BaseModel):
    status: str
    message: str
    queries: int
    slow_queries: int
    p95_ms: float


# -- Workout sources --


class ExerciseEntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    order: int
    prescription: dict[str, Any] = Field(default_factory=dict)
    exercise_id: Optional[int] = None
    notes: Optional[str] = None
    category: Optional[str] = None
    video_url: Optional[str] = None


class BlockResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    title: str
    order: int
    exercises: list[ExerciseEntryResponse] = Field(default_factory=list)


class WorkoutDetailResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    source_type: SourceType
    id: int
    title: str
    description: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    difficulty: Optional[str] = None
    equipment: list[str] = Field(default_factory=list)
    estimated_duration: Optional[int] = None
    blocks: list[BlockResponse] = Field(default_factory=list)
    coach_id: Optional[str] = None
    source_template_id: Optional[int] = None


class TemplateSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    difficulty: Optional[str] = None
    equipment: list[str] = Field(default_factory=list)
    estimated_duration: Optional[int] = None


class CustomWorkoutSummary(TemplateSummary):
    coach_id: str
    source_template_id: Optional[int] = None
    updated_at: Optional[dt_datetime] = None


# -- Assignments --


class AssignmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    athlete_id: str
    coach_id: str
    source_type: str
    source_id: int
    scheduled_date: dt_date
    status: str
    recurring_id: Optional[int] = None
    created_at: Optional[dt_datetime] = None


class AssignResponse(BaseModel):
    count: int
    assignments: list[AssignmentResponse]


class CoachAssignmentItem(AssignmentResponse):
    workout_title: str
    athlete_name: Optional[str] = None


class AthleteAssignmentItem(AssignmentResponse):
    workout_title: str
    coach_name: Optional[str] = None


class RecurringResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    coach_id: str
    source_type: str
    source_id: int
    athlete_ids: Optional[list[str]] = None
    group_id: Optional[int] = None
    frequency: str
    days_of_week: list[int]
    start_date: dt_date
    end_date: dt_date
    active: bool
    created_at: Optional[dt_datetime] = None


class RecurringListItem(RecurringResponse):
    workout_title: str
    days_label: str


class RecurringCreatedResponse(BaseModel):
    recurring: RecurringResponse
    count: int
    assignments: list[AssignmentResponse]


# -- Logging --


class SetLogResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    exercise_name: str
    set_number: int
    reps: Optional[int] = None
    weight: Optional[str] = None
    time_seconds: Optional[int] = None
    distance_meters: Optional[int] = None
    rpe: Optional[int] = None
    notes: Optional[str] = None


class WorkoutLogResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    assignment_id: int
    athlete_id: str
    overall_notes: Optional[str] = None
    avg_heart_rate: Optional[int] = None
    max_heart_rate: Optional[int] = None
    min_heart_rate: Optional[int] = None
    device_name: Optional[str] = None
    completed_at: Optional[dt_datetime] = None
    updated_at: Optional[dt_datetime] = None
    sets: list[SetLogResponse] = Field(default_factory=list)


class CoachLogResponse(BaseModel):
    assignment: AssignmentResponse
    log: Optional[WorkoutLogResponse] = None


class AthleteWorkoutResponse(BaseModel):
    assignment: AthleteAssignmentItem
    workout: Optional[WorkoutDetailResponse] = None
    log: Optional[WorkoutLogResponse] = None
