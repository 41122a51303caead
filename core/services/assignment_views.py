"""Read-side views that enrich assignments with titles and counterpart names."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from core.errors import NotFound
from core.models import Assignment, WorkoutLog
from core.services.assignments import athlete_assignment
from core.services.directory import display_name, get_users
from core.services.workout_logging import get_log
from core.services.workout_sources import SourceRef, WorkoutSourceDetail, get_source, source_titles


@dataclass
class EnrichedAssignment:
    id: int
    athlete_id: str
    coach_id: str
    source_type: str
    source_id: int
    scheduled_date: dt.date
    status: str
    recurring_id: Optional[int]
    created_at: Optional[dt.datetime]
    workout_title: str
    athlete_name: Optional[str] = None
    coach_name: Optional[str] = None


@dataclass
class AthleteWorkoutView:
    assignment: EnrichedAssignment
    workout: Optional[WorkoutSourceDetail]
    log: Optional[WorkoutLog]


def _enrich(s: Session, rows: Sequence[Assignment], counterpart: str) -> list[EnrichedAssignment]:
    refs = [SourceRef.of(r) for r in rows]
    titles = source_titles(s, refs)
    user_ids = [getattr(r, f"{counterpart}_id") for r in rows]
    users = get_users(s, user_ids)
    out: list[EnrichedAssignment] = []
    for row, ref, uid in zip(rows, refs, user_ids):
        item = EnrichedAssignment(
            id=row.id,
            athlete_id=row.athlete_id,
            coach_id=row.coach_id,
            source_type=row.source_type,
            source_id=row.source_id,
            scheduled_date=row.scheduled_date,
            status=row.status,
            recurring_id=row.recurring_id,
            created_at=row.created_at,
            workout_title=titles.get(ref, ref.fallback_title),
        )
        setattr(item, f"{counterpart}_name", display_name(users.get(uid)))
        out.append(item)
    return out


def _newest_first(q):
    return q.order_by(Assignment.scheduled_date.desc(), Assignment.id.desc())


def list_for_coach(s: Session, coach_id: str, status: Optional[str] = None) -> list[EnrichedAssignment]:
    """Coach's issued assignments with athlete names, newest scheduled date first."""
    q = select(Assignment).where(Assignment.coach_id == coach_id)
    if status:
        q = q.where(Assignment.status == status)
    rows = s.execute(_newest_first(q)).scalars().all()
    return _enrich(s, rows, "athlete")


def list_for_athlete(s: Session, athlete_id: str, status: Optional[str] = None) -> list[EnrichedAssignment]:
    """Athlete's assignments with coach names, newest scheduled date first."""
    q = select(Assignment).where(Assignment.athlete_id == athlete_id)
    if status:
        q = q.where(Assignment.status == status)
    rows = s.execute(_newest_first(q)).scalars().all()
    return _enrich(s, rows, "coach")


def get_athlete_workout(s: Session, assignment_id: int, athlete_id: str) -> AthleteWorkoutView:
    """Everything an athlete needs to open one assignment.

    ``workout`` is None when the source has since been deleted.
    """
    assignment = athlete_assignment(s, assignment_id, athlete_id)
    enriched = _enrich(s, [assignment], "coach")[0]
    try:
        workout = get_source(s, SourceRef.of(assignment))
    except NotFound:
        workout = None
    return AthleteWorkoutView(assignment=enriched, workout=workout, log=get_log(s, assignment.id))
