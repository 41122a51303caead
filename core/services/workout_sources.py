"""Workout source model: templates, custom workouts and cloning.

A workout source is a tree: workout -> ordered blocks -> ordered
exercises with a prescription. Templates are shared and clonable;
custom workouts belong to one coach. Assignments point at either kind
through a ``SourceRef``, the tagged union that replaces a pair of
nullable foreign keys, and every lookup goes through ``load_source``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional, Union

from sqlalchemy import select
from sqlalchemy.orm import Session

from core.errors import Forbidden, NotFound, ValidationError
from core.models import (
    CustomBlock,
    CustomExercise,
    CustomWorkout,
    SourceType,
    WorkoutTemplate,
)
from core.services.directory import get_exercises
from core.validators import BlockInput, CustomWorkoutInput

logger = logging.getLogger(__name__)

WorkoutRow = Union[WorkoutTemplate, CustomWorkout]

_SOURCE_MODELS: dict[SourceType, type] = {
    SourceType.TEMPLATE: WorkoutTemplate,
    SourceType.CUSTOM: CustomWorkout,
}


@dataclass(frozen=True)
class SourceRef:
    """Polymorphic pointer at a template or a custom workout."""

    kind: SourceType
    id: int

    @classmethod
    def template(cls, template_id: int) -> "SourceRef":
        return cls(SourceType.TEMPLATE, int(template_id))

    @classmethod
    def custom(cls, workout_id: int) -> "SourceRef":
        return cls(SourceType.CUSTOM, int(workout_id))

    @classmethod
    def parse(cls, source_type: Any, source_id: Any) -> "SourceRef":
        try:
            kind = SourceType(getattr(source_type, "value", source_type))
        except ValueError as exc:
            raise ValidationError(f"Unknown source type: {source_type!r}") from exc
        try:
            sid = int(source_id)
        except (TypeError, ValueError) as exc:
            raise ValidationError(f"Invalid source id: {source_id!r}") from exc
        return cls(kind, sid)

    @classmethod
    def of(cls, row: Any) -> "SourceRef":
        """Reference held by an assignment or recurring row."""
        return cls.parse(row.source_type, row.source_id)

    @property
    def fallback_title(self) -> str:
        return f"#{self.id}"


@dataclass
class ExerciseEntry:
    name: str
    order: int
    prescription: dict[str, Any]
    exercise_id: Optional[int] = None
    notes: Optional[str] = None
    category: Optional[str] = None
    video_url: Optional[str] = None


@dataclass
class BlockDetail:
    title: str
    order: int
    exercises: list[ExerciseEntry] = field(default_factory=list)


@dataclass
class WorkoutSourceDetail:
    source_type: SourceType
    id: int
    title: str
    description: Optional[str]
    tags: list[str]
    difficulty: Optional[str]
    equipment: list[str]
    estimated_duration: Optional[int]
    blocks: list[BlockDetail]
    coach_id: Optional[str] = None
    source_template_id: Optional[int] = None


def _ordered(items: Iterable[Any]) -> list[Any]:
    # sorted() is stable: equal `order` keeps insertion sequence.
    return sorted(items, key=lambda item: item.order)


def load_source(s: Session, ref: SourceRef) -> WorkoutRow | None:
    """The one place a source reference is dereferenced."""
    return s.get(_SOURCE_MODELS[ref.kind], ref.id)


def get_source(s: Session, ref: SourceRef) -> WorkoutSourceDetail:
    row = load_source(s, ref)
    if row is None:
        raise NotFound(f"{ref.kind.value.title()} workout {ref.id} not found")
    return _to_detail(s, ref, row)


def _to_detail(s: Session, ref: SourceRef, row: WorkoutRow) -> WorkoutSourceDetail:
    blocks = _ordered(row.blocks)
    library = get_exercises(s, (ex.exercise_id for b in blocks for ex in b.exercises))
    out_blocks: list[BlockDetail] = []
    for block in blocks:
        entries = []
        for ex in _ordered(block.exercises):
            lib = library.get(ex.exercise_id) if ex.exercise_id else None
            entries.append(
                ExerciseEntry(
                    name=ex.name,
                    order=ex.order,
                    prescription=dict(ex.prescription_json or {}),
                    exercise_id=ex.exercise_id,
                    notes=ex.notes,
                    category=lib.category if lib else None,
                    video_url=lib.video_url if lib else None,
                )
            )
        out_blocks.append(BlockDetail(title=block.title, order=block.order, exercises=entries))
    return WorkoutSourceDetail(
        source_type=ref.kind,
        id=row.id,
        title=row.title,
        description=row.description,
        tags=list(row.tags or []),
        difficulty=row.difficulty,
        equipment=list(row.equipment or []),
        estimated_duration=row.estimated_duration,
        blocks=out_blocks,
        coach_id=getattr(row, "coach_id", None),
        source_template_id=getattr(row, "source_template_id", None),
    )


def source_titles(s: Session, refs: Iterable[SourceRef]) -> dict[SourceRef, str]:
    """Batch title lookup, one query per source table. Missing refs are absent."""
    wanted: dict[SourceType, set[int]] = {}
    for ref in refs:
        wanted.setdefault(ref.kind, set()).add(ref.id)
    titles: dict[SourceRef, str] = {}
    for kind, ids in wanted.items():
        model = _SOURCE_MODELS[kind]
        rows = s.execute(select(model.id, model.title).where(model.id.in_(ids))).all()
        for row_id, title in rows:
            titles[SourceRef(kind, row_id)] = title
    return titles


def source_title(s: Session, ref: SourceRef) -> str | None:
    row = load_source(s, ref)
    return row.title if row is not None else None


def require_assignable(s: Session, ref: SourceRef, coach_id: str) -> WorkoutRow:
    """Source must exist; custom workouts may only be assigned by their owner."""
    row = load_source(s, ref)
    if row is None:
        raise NotFound(f"{ref.kind.value.title()} workout {ref.id} not found")
    if ref.kind is SourceType.CUSTOM and row.coach_id != coach_id:
        raise Forbidden("Custom workout belongs to another coach")
    return row


# -- Templates --


def list_templates(
    s: Session,
    difficulty: Optional[str] = None,
    tag: Optional[str] = None,
    search: Optional[str] = None,
) -> list[WorkoutTemplate]:
    q = select(WorkoutTemplate).order_by(WorkoutTemplate.title, WorkoutTemplate.id)
    if difficulty:
        q = q.where(WorkoutTemplate.difficulty == difficulty)
    rows = list(s.execute(q).scalars().all())
    if tag:
        needle = tag.strip().lower()
        rows = [r for r in rows if any(t.lower() == needle for t in (r.tags or []))]
    if search:
        needle = search.strip().lower()
        rows = [
            r
            for r in rows
            if needle in r.title.lower() or any(needle in t.lower() for t in (r.tags or []))
        ]
    return rows


def clone_template(s: Session, template_id: int, coach_id: str) -> CustomWorkout:
    """Deep-copy a template's block tree into a new custom workout owned by ``coach_id``."""
    template = s.get(WorkoutTemplate, template_id)
    if template is None:
        raise NotFound(f"Template {template_id} not found")

    workout = CustomWorkout(
        coach_id=coach_id,
        source_template_id=template.id,
        title=template.title,
        description=template.description,
        tags=list(template.tags or []),
        difficulty=template.difficulty,
        equipment=list(template.equipment or []),
        estimated_duration=template.estimated_duration,
    )
    for block in _ordered(template.blocks):
        workout.blocks.append(
            CustomBlock(
                title=block.title,
                order=block.order,
                exercises=[
                    CustomExercise(
                        name=ex.name,
                        exercise_id=ex.exercise_id,
                        order=ex.order,
                        prescription_json=dict(ex.prescription_json or {}),
                        notes=ex.notes,
                    )
                    for ex in _ordered(block.exercises)
                ],
            )
        )
    s.add(workout)
    s.flush()
    logger.info(
        "template_cloned",
        extra={"template_id": template.id, "custom_workout_id": workout.id, "coach_id": coach_id},
    )
    return workout


# -- Custom workouts --


def _build_blocks(blocks: list[BlockInput]) -> list[CustomBlock]:
    return [
        CustomBlock(
            title=b.title,
            order=b.order,
            exercises=[
                CustomExercise(
                    name=ex.name.strip(),
                    exercise_id=ex.exercise_id,
                    order=ex.order,
                    prescription_json=ex.prescription.as_json(),
                    notes=ex.notes,
                )
                for ex in b.exercises
            ],
        )
        for b in blocks
    ]


def owned_custom_workout(s: Session, workout_id: int, coach_id: str) -> CustomWorkout:
    workout = s.get(CustomWorkout, workout_id)
    if workout is None:
        raise NotFound(f"Custom workout {workout_id} not found")
    if workout.coach_id != coach_id:
        raise Forbidden("Custom workout belongs to another coach")
    return workout


def list_custom_workouts(s: Session, coach_id: str) -> list[CustomWorkout]:
    return list(
        s.execute(
            select(CustomWorkout)
            .where(CustomWorkout.coach_id == coach_id)
            .order_by(CustomWorkout.updated_at.desc(), CustomWorkout.id.desc())
        ).scalars().all()
    )


def get_custom_workout(s: Session, workout_id: int, coach_id: str) -> WorkoutSourceDetail:
    workout = owned_custom_workout(s, workout_id, coach_id)
    return _to_detail(s, SourceRef.custom(workout.id), workout)


def create_custom_workout(s: Session, coach_id: str, data: CustomWorkoutInput) -> CustomWorkout:
    workout = CustomWorkout(
        coach_id=coach_id,
        title=data.title,
        description=data.description,
        tags=list(data.tags),
        difficulty=data.difficulty,
        equipment=list(data.equipment),
        estimated_duration=data.estimated_duration,
        blocks=_build_blocks(data.blocks),
    )
    s.add(workout)
    s.flush()
    logger.info("custom_workout_created", extra={"custom_workout_id": workout.id, "coach_id": coach_id})
    return workout


def update_custom_workout(s: Session, workout_id: int, coach_id: str, data: CustomWorkoutInput) -> CustomWorkout:
    """Update metadata and replace the whole block tree."""
    workout = owned_custom_workout(s, workout_id, coach_id)
    workout.title = data.title
    workout.description = data.description
    workout.tags = list(data.tags)
    workout.difficulty = data.difficulty
    workout.equipment = list(data.equipment)
    workout.estimated_duration = data.estimated_duration
    workout.blocks.clear()
    s.flush()
    workout.blocks.extend(_build_blocks(data.blocks))
    s.flush()
    logger.info(
        "custom_workout_updated",
        extra={"custom_workout_id": workout.id, "coach_id": coach_id, "blocks": len(data.blocks)},
    )
    return workout


def delete_custom_workout(s: Session, workout_id: int, coach_id: str) -> None:
    """Delete with its blocks and exercises; assignments keep the dangling reference."""
    workout = owned_custom_workout(s, workout_id, coach_id)
    s.delete(workout)
    s.flush()
    logger.info("custom_workout_deleted", extra={"custom_workout_id": workout_id, "coach_id": coach_id})
