"""Idempotent seed of the exercise library and premade templates.

Run explicitly (``python -m db.seed``), never as a side effect of
starting the API. Existing rows are matched by name/title and left
untouched, so running it twice changes nothing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from core.models import Exercise, TemplateBlock, TemplateExercise, WorkoutTemplate
from core.services.template_catalog import EXERCISE_LIBRARY, TEMPLATES, CatalogTemplate

logger = logging.getLogger(__name__)


@dataclass
class SeedReport:
    exercises_created: int = 0
    templates_created: int = 0

    @property
    def changed(self) -> bool:
        return bool(self.exercises_created or self.templates_created)


def seed_exercise_library(s: Session) -> int:
    existing = {n.lower() for n in s.execute(select(Exercise.name)).scalars().all()}
    created = 0
    for item in EXERCISE_LIBRARY:
        if item.name.lower() in existing:
            continue
        s.add(Exercise(name=item.name, category=item.category, instructions=item.instructions, video_url=item.video_url))
        existing.add(item.name.lower())
        created += 1
    s.flush()
    return created


def _build_template(entry: CatalogTemplate, library_ids: dict[str, int]) -> WorkoutTemplate:
    template = WorkoutTemplate(
        title=entry.title,
        description=entry.description,
        difficulty=entry.difficulty,
        tags=list(entry.tags),
        equipment=list(entry.equipment),
        estimated_duration=entry.estimated_duration,
    )
    for b_idx, block in enumerate(entry.blocks, start=1):
        template.blocks.append(
            TemplateBlock(
                title=block.title,
                order=b_idx,
                exercises=[
                    TemplateExercise(
                        name=ex.name,
                        exercise_id=library_ids.get(ex.name.lower()),
                        order=e_idx,
                        prescription_json=ex.prescription(),
                        notes=ex.notes,
                    )
                    for e_idx, ex in enumerate(block.exercises, start=1)
                ],
            )
        )
    return template


def seed_templates(s: Session) -> int:
    existing = {t.lower() for t in s.execute(select(WorkoutTemplate.title)).scalars().all()}
    library_ids = {
        name.lower(): eid for eid, name in s.execute(select(Exercise.id, Exercise.name)).all()
    }
    created = 0
    for entry in TEMPLATES:
        if entry.title.lower() in existing:
            continue
        s.add(_build_template(entry, library_ids))
        existing.add(entry.title.lower())
        created += 1
    s.flush()
    return created


def ensure_seeded(s: Session) -> SeedReport:
    report = SeedReport(
        exercises_created=seed_exercise_library(s),
        templates_created=seed_templates(s),
    )
    total = s.execute(select(func.count()).select_from(WorkoutTemplate)).scalar_one()
    logger.info(
        "bootstrap_complete",
        extra={
            "exercises_created": report.exercises_created,
            "templates_created": report.templates_created,
            "templates_total": total,
        },
    )
    return report
