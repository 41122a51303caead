"""Workout logging: per-set results and heart-rate summary for one assignment.

One log per assignment, upserted by ``assignment_id``. Every save replaces
the full set list. Completion stamps ``completed_at`` on the log and moves
the assignment to COMPLETED; there is no way back to UPCOMING.

Set rows name their exercise as free text and are never linked to the
source's exercise rows or the exercise library. Renaming an exercise in a
workout after athletes have logged it leaves the old name on historical
sets; logs stay exactly as submitted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from core.models import Assignment, AssignmentStatus, SetLog, WorkoutLog, utcnow
from core.services.assignments import athlete_assignment, coach_assignment
from core.validators import SetLogInput

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HeartRateSummary:
    """Session summary from an external HR sensor, stored as-is."""

    avg_heart_rate: Optional[int] = None
    max_heart_rate: Optional[int] = None
    min_heart_rate: Optional[int] = None
    device_name: Optional[str] = None


def get_log(s: Session, assignment_id: int) -> WorkoutLog | None:
    return s.execute(select(WorkoutLog).where(WorkoutLog.assignment_id == assignment_id)).scalar_one_or_none()


def _upsert_log(s: Session, assignment: Assignment, athlete_id: str) -> WorkoutLog:
    log = get_log(s, assignment.id)
    if log is None:
        log = WorkoutLog(assignment_id=assignment.id, athlete_id=athlete_id)
        s.add(log)
        s.flush()
    return log


def _apply_heart_rate(log: WorkoutLog, heart_rate: HeartRateSummary) -> None:
    log.avg_heart_rate = heart_rate.avg_heart_rate
    log.max_heart_rate = heart_rate.max_heart_rate
    log.min_heart_rate = heart_rate.min_heart_rate
    log.device_name = heart_rate.device_name


def _replace_sets(s: Session, log: WorkoutLog, sets: Sequence[SetLogInput]) -> None:
    log.sets.clear()
    s.flush()
    for entry in sets:
        log.sets.append(
            SetLog(
                exercise_name=entry.exercise_name.strip(),
                set_number=entry.set_number,
                reps=entry.reps,
                weight=entry.weight,
                time_seconds=entry.time_seconds,
                distance_meters=entry.distance_meters,
                rpe=entry.rpe,
                notes=entry.notes,
            )
        )
    s.flush()


def save_progress(
    s: Session,
    assignment_id: int,
    athlete_id: str,
    overall_notes: Optional[str],
    sets: Sequence[SetLogInput],
    heart_rate: Optional[HeartRateSummary] = None,
) -> WorkoutLog:
    """Upsert the log and replace its sets. ``completed_at`` is left alone.

    Heart-rate fields are only written when a summary is supplied.
    """
    assignment = athlete_assignment(s, assignment_id, athlete_id, lock=True)
    log = _upsert_log(s, assignment, athlete_id)
    log.overall_notes = overall_notes
    if heart_rate is not None:
        _apply_heart_rate(log, heart_rate)
    _replace_sets(s, log, sets)
    logger.info(
        "workout_log_saved",
        extra={
            "assignment_id": assignment.id,
            "workout_log_id": log.id,
            "athlete_id": athlete_id,
            "sets": len(sets),
            "has_heart_rate": heart_rate is not None,
        },
    )
    return log


def complete(s: Session, assignment_id: int, athlete_id: str) -> Assignment:
    """Stamp ``completed_at`` and mark the assignment COMPLETED.

    Repeating the call is harmless: status stays COMPLETED and the
    timestamp is refreshed.
    """
    assignment = athlete_assignment(s, assignment_id, athlete_id, lock=True)
    log = _upsert_log(s, assignment, athlete_id)
    log.completed_at = utcnow()
    already = assignment.status == AssignmentStatus.COMPLETED.value
    assignment.status = AssignmentStatus.COMPLETED.value
    s.flush()
    logger.info(
        "assignment_completed",
        extra={
            "assignment_id": assignment.id,
            "workout_log_id": log.id,
            "athlete_id": athlete_id,
            "repeat": already,
        },
    )
    return assignment


def get_log_for_athlete(s: Session, assignment_id: int, athlete_id: str) -> WorkoutLog | None:
    athlete_assignment(s, assignment_id, athlete_id)
    return get_log(s, assignment_id)


def get_log_for_coach(s: Session, assignment_id: int, coach_id: str) -> tuple[Assignment, WorkoutLog | None]:
    assignment = coach_assignment(s, assignment_id, coach_id)
    return assignment, get_log(s, assignment.id)
