"""Assignment fan-out: one assign action, one Assignment row per athlete."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional, Sequence

from sqlalchemy.orm import Session

from core.errors import Forbidden, NotFound, ValidationError
from core.models import Assignment, AssignmentStatus
from core.services.directory import get_group, get_group_members
from core.services.workout_sources import SourceRef, require_assignable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AssignmentTarget:
    """Either an explicit athlete list or a group, never both."""

    athlete_ids: Optional[tuple[str, ...]] = None
    group_id: Optional[int] = None

    @classmethod
    def build(cls, athlete_ids: Optional[Sequence[str]] = None, group_id: Optional[int] = None) -> "AssignmentTarget":
        if athlete_ids is not None and group_id is not None:
            raise ValidationError("Provide either athlete_ids or group_id, not both")
        if group_id is not None:
            return cls(group_id=int(group_id))
        if athlete_ids is None:
            raise ValidationError("A target is required: athlete_ids or group_id")
        cleaned: list[str] = []
        for raw in athlete_ids:
            athlete_id = str(raw or "").strip()
            if athlete_id and athlete_id not in cleaned:
                cleaned.append(athlete_id)
        if not cleaned:
            raise ValidationError("athlete_ids must not be empty")
        return cls(athlete_ids=tuple(cleaned))

    @property
    def is_group(self) -> bool:
        return self.group_id is not None


def resolve_target(s: Session, coach_id: str, target: AssignmentTarget) -> list[str]:
    """Athlete ids the target stands for right now. An empty group resolves to []."""
    if not target.is_group:
        return list(target.athlete_ids or ())
    group = get_group(s, target.group_id)
    if group is None:
        raise NotFound(f"Group {target.group_id} not found")
    if group.coach_id != coach_id:
        raise Forbidden("Group belongs to another coach")
    return get_group_members(s, group.id)


def create_assignments(
    s: Session,
    coach_id: str,
    ref: SourceRef,
    scheduled_date: date,
    athlete_ids: Sequence[str],
    recurring_id: Optional[int] = None,
) -> list[Assignment]:
    """Insert one UPCOMING row per athlete. Callers have already validated."""
    rows = [
        Assignment(
            athlete_id=athlete_id,
            coach_id=coach_id,
            source_type=ref.kind.value,
            source_id=ref.id,
            scheduled_date=scheduled_date,
            status=AssignmentStatus.UPCOMING.value,
            recurring_id=recurring_id,
        )
        for athlete_id in athlete_ids
    ]
    s.add_all(rows)
    s.flush()
    return rows


def assign(
    s: Session,
    coach_id: str,
    ref: SourceRef,
    scheduled_date: date,
    target: AssignmentTarget,
) -> list[Assignment]:
    """Fan a workout source out to every athlete in ``target`` for one date.

    Re-assigning the same source/date/athlete creates another row; there
    is no duplicate detection.
    """
    require_assignable(s, ref, coach_id)
    athlete_ids = resolve_target(s, coach_id, target)
    rows = create_assignments(s, coach_id, ref, scheduled_date, athlete_ids)
    logger.info(
        "assignments_created",
        extra={
            "coach_id": coach_id,
            "source_type": ref.kind.value,
            "source_id": ref.id,
            "scheduled_date": scheduled_date.isoformat(),
            "group_id": target.group_id,
            "count": len(rows),
        },
    )
    return rows


def get_assignment(s: Session, assignment_id: int) -> Assignment:
    row = s.get(Assignment, assignment_id)
    if row is None:
        raise NotFound(f"Assignment {assignment_id} not found")
    return row


def athlete_assignment(s: Session, assignment_id: int, athlete_id: str, lock: bool = False) -> Assignment:
    """Assignment owned by ``athlete_id``; ``lock`` takes a row lock where supported."""
    if lock:
        row = s.get(Assignment, assignment_id, with_for_update=True)
    else:
        row = s.get(Assignment, assignment_id)
    if row is None:
        raise NotFound(f"Assignment {assignment_id} not found")
    if row.athlete_id != athlete_id:
        raise Forbidden("Assignment belongs to another athlete")
    return row


def coach_assignment(s: Session, assignment_id: int, coach_id: str) -> Assignment:
    row = get_assignment(s, assignment_id)
    if row.coach_id != coach_id:
        raise Forbidden("Assignment was issued by another coach")
    return row
