"""Recurring assignments: eager, one-shot expansion over a date range.

A recurrence is saved first, then every date in ``[start, end]`` whose
weekday is selected gets a normal fan-out. Nothing is generated later;
stopping a recurrence only flips ``active`` and leaves created rows alone.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from core.config import get_settings
from core.errors import Forbidden, NotFound, ValidationError
from core.models import RECURRING_FREQUENCIES, Assignment, RecurringAssignment
from core.services.assignments import AssignmentTarget, create_assignments, resolve_target
from core.services.workout_sources import SourceRef, require_assignable, source_titles

logger = logging.getLogger(__name__)

WEEKDAY_LABELS = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")


@dataclass
class RecurringResult:
    recurring: RecurringAssignment
    created: list[Assignment]


@dataclass
class RecurringView:
    recurring: RecurringAssignment
    workout_title: str


def weekday_index(d: date) -> int:
    """Sunday=0 .. Saturday=6."""
    return d.isoweekday() % 7


def normalize_days(days_of_week: Iterable[int]) -> list[int]:
    days = sorted({int(d) for d in days_of_week})
    if not days:
        raise ValidationError("days_of_week must not be empty")
    bad = [d for d in days if d < 0 or d > 6]
    if bad:
        raise ValidationError(f"days_of_week must be within 0-6 (Sunday=0), got {bad}")
    return days


def matching_dates(days_of_week: Iterable[int], start_date: date, end_date: date) -> list[date]:
    """Every date in the inclusive range whose weekday is selected, ascending."""
    selected = set(days_of_week)
    out: list[date] = []
    d = start_date
    while d <= end_date:
        if weekday_index(d) in selected:
            out.append(d)
        d += timedelta(days=1)
    return out


def describe_days(days_of_week: Iterable[int]) -> str:
    return ", ".join(WEEKDAY_LABELS[d] for d in sorted(days_of_week))


def _validate_range(start_date: date, end_date: date) -> None:
    if end_date < start_date:
        raise ValidationError("end_date must be on or after start_date")
    max_span = get_settings().max_recurring_span_days
    span = (end_date - start_date).days + 1
    if span > max_span:
        raise ValidationError(f"Date range spans {span} days; the maximum is {max_span}")


def create_recurring(
    s: Session,
    coach_id: str,
    ref: SourceRef,
    target: AssignmentTarget,
    days_of_week: Iterable[int],
    start_date: date,
    end_date: date,
    frequency: str = "weekly",
) -> RecurringResult:
    """Persist the recurrence, then fan out once per matching date.

    ``frequency`` is a display label; ``days_of_week`` alone decides
    which dates are generated.
    """
    days = normalize_days(days_of_week)
    _validate_range(start_date, end_date)
    if frequency not in RECURRING_FREQUENCIES:
        raise ValidationError(f"frequency must be one of {list(RECURRING_FREQUENCIES)}")
    require_assignable(s, ref, coach_id)
    athlete_ids = resolve_target(s, coach_id, target)

    recurring = RecurringAssignment(
        coach_id=coach_id,
        source_type=ref.kind.value,
        source_id=ref.id,
        athlete_ids=list(target.athlete_ids) if not target.is_group else None,
        group_id=target.group_id,
        frequency=frequency,
        days_of_week=days,
        start_date=start_date,
        end_date=end_date,
        active=True,
    )
    s.add(recurring)
    s.flush()

    created: list[Assignment] = []
    dates = matching_dates(days, start_date, end_date)
    for scheduled in dates:
        created.extend(create_assignments(s, coach_id, ref, scheduled, athlete_ids, recurring_id=recurring.id))

    logger.info(
        "recurring_created",
        extra={
            "recurring_id": recurring.id,
            "coach_id": coach_id,
            "source_type": ref.kind.value,
            "source_id": ref.id,
            "days_of_week": days,
            "dates": len(dates),
            "athletes": len(athlete_ids),
            "count": len(created),
        },
    )
    return RecurringResult(recurring=recurring, created=created)


def stop_recurring(s: Session, recurring_id: int, coach_id: str) -> RecurringAssignment:
    """Deactivate. Already-created assignments are kept as they are."""
    recurring = s.get(RecurringAssignment, recurring_id)
    if recurring is None:
        raise NotFound(f"Recurring assignment {recurring_id} not found")
    if recurring.coach_id != coach_id:
        raise Forbidden("Recurring assignment belongs to another coach")
    if recurring.active:
        recurring.active = False
        s.flush()
        logger.info("recurring_stopped", extra={"recurring_id": recurring.id, "coach_id": coach_id})
    return recurring


def list_recurring(s: Session, coach_id: str, active: Optional[bool] = None) -> list[RecurringView]:
    q = select(RecurringAssignment).where(RecurringAssignment.coach_id == coach_id)
    if active is not None:
        q = q.where(RecurringAssignment.active.is_(active))
    rows = s.execute(q.order_by(RecurringAssignment.created_at.desc(), RecurringAssignment.id.desc())).scalars().all()
    refs = [SourceRef.of(r) for r in rows]
    titles = source_titles(s, refs)
    return [RecurringView(recurring=r, workout_title=titles.get(ref, ref.fallback_title)) for r, ref in zip(rows, refs)]
