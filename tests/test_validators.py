"""Tests for request validation models."""

from __future__ import annotations

from datetime import date

import pytest
from pydantic import ValidationError

from core.models import SourceType
from core.validators import (
    AssignInput,
    CustomWorkoutInput,
    HeartRateInput,
    PrescriptionInput,
    RecurringAssignInput,
    SaveProgressInput,
    SetLogInput,
)


# ── Custom workouts ───────────────────────────────────────────────────────


def test_custom_workout_title_trimmed():
    w = CustomWorkoutInput(title="  Push Day  ")
    assert w.title == "Push Day"


def test_custom_workout_blank_title_rejected():
    with pytest.raises(ValidationError):
        CustomWorkoutInput(title="   ")


def test_custom_workout_tags_treated_as_set():
    w = CustomWorkoutInput(title="x", tags=["Power", "power", "", "Speed"], equipment=["Bar", "bar"])
    assert w.tags == ["Power", "Speed"]
    assert w.equipment == ["Bar"]


def test_custom_workout_duration_bounds():
    with pytest.raises(ValidationError):
        CustomWorkoutInput(title="x", estimated_duration=0)


def test_prescription_as_json_drops_missing_fields():
    assert PrescriptionInput(sets=3, reps="8-10").as_json() == {"sets": 3, "reps": "8-10"}
    assert PrescriptionInput().as_json() == {}


# ── Assign / recurring ────────────────────────────────────────────────────


def test_assign_input_parses_source_type():
    a = AssignInput(source_type="CUSTOM", source_id=4, scheduled_date="2024-03-01", athlete_ids=["a1"])
    assert a.source_type is SourceType.CUSTOM
    assert a.scheduled_date == date(2024, 3, 1)


def test_assign_input_rejects_unknown_source_type():
    with pytest.raises(ValidationError):
        AssignInput(source_type="PROGRAM", source_id=1, scheduled_date="2024-03-01", group_id=1)


def test_recurring_days_sorted_and_deduplicated():
    r = RecurringAssignInput(
        source_type="TEMPLATE",
        source_id=1,
        days_of_week=[5, 1, 5],
        start_date="2024-01-01",
        end_date="2024-01-31",
        group_id=2,
    )
    assert r.days_of_week == [1, 5]
    assert r.frequency == "weekly"


@pytest.mark.parametrize("athlete_id", ["", "a" * 65])
def test_assign_athlete_id_length_bounded(athlete_id):
    with pytest.raises(ValidationError):
        AssignInput(source_type="TEMPLATE", source_id=1, scheduled_date="2024-03-01", athlete_ids=[athlete_id])
    with pytest.raises(ValidationError):
        RecurringAssignInput(
            source_type="TEMPLATE",
            source_id=1,
            days_of_week=[1],
            start_date="2024-01-01",
            end_date="2024-01-31",
            athlete_ids=["a1", athlete_id],
        )
    assert AssignInput(
        source_type="TEMPLATE", source_id=1, scheduled_date="2024-03-01", athlete_ids=["a" * 64]
    ).athlete_ids == ["a" * 64]


@pytest.mark.parametrize("days", [[], [7], [-1, 2]])
def test_recurring_days_invalid(days):
    with pytest.raises(ValidationError):
        RecurringAssignInput(
            source_type="TEMPLATE",
            source_id=1,
            days_of_week=days,
            start_date="2024-01-01",
            end_date="2024-01-31",
            athlete_ids=["a1"],
        )


def test_recurring_frequency_label_restricted():
    with pytest.raises(ValidationError):
        RecurringAssignInput(
            source_type="TEMPLATE",
            source_id=1,
            frequency="daily",
            days_of_week=[1],
            start_date="2024-01-01",
            end_date="2024-01-31",
            athlete_ids=["a1"],
        )


# ── Logging ───────────────────────────────────────────────────────────────


def test_set_log_rpe_range():
    assert SetLogInput(exercise_name="Squat", set_number=1, rpe=10).rpe == 10
    with pytest.raises(ValidationError):
        SetLogInput(exercise_name="Squat", set_number=1, rpe=11)


def test_set_number_starts_at_one():
    with pytest.raises(ValidationError):
        SetLogInput(exercise_name="Squat", set_number=0)


def test_heart_rate_bounds_ordered():
    HeartRateInput(avg_heart_rate=140, max_heart_rate=170, min_heart_rate=90)
    with pytest.raises(ValidationError):
        HeartRateInput(avg_heart_rate=180, max_heart_rate=170)
    with pytest.raises(ValidationError):
        HeartRateInput(min_heart_rate=120, max_heart_rate=100)


def test_save_progress_defaults():
    p = SaveProgressInput()
    assert p.sets == []
    assert p.heart_rate is None
