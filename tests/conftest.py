from __future__ import annotations

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from core.models import (
    AthleteGroup,
    AthleteGroupMember,
    Base,
    CustomWorkout,
    TemplateBlock,
    TemplateExercise,
    User,
    WorkoutTemplate,
)
from core.services.workout_sources import clone_template


@pytest.fixture()
def db() -> Session:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


def add_user(s: Session, user_id: str, role: str = "athlete", **fields) -> User:
    user = User(id=user_id, role=role, **fields)
    s.add(user)
    s.flush()
    return user


def add_group(s: Session, coach_id: str, athlete_ids: list[str], name: str = "Squad") -> AthleteGroup:
    group = AthleteGroup(coach_id=coach_id, name=name)
    group.members = [AthleteGroupMember(athlete_id=a) for a in athlete_ids]
    s.add(group)
    s.flush()
    return group


def add_template(s: Session, title: str = "Leg Day", **fields) -> WorkoutTemplate:
    """Two blocks stored out of order so ordering is exercised."""
    template = WorkoutTemplate(
        title=title,
        description=fields.pop("description", "Lower body strength"),
        tags=fields.pop("tags", ["Strength"]),
        difficulty=fields.pop("difficulty", "Intermediate"),
        equipment=fields.pop("equipment", ["Barbell"]),
        estimated_duration=fields.pop("estimated_duration", 60),
        **fields,
    )
    template.blocks = [
        TemplateBlock(
            title="Accessories",
            order=2,
            exercises=[TemplateExercise(name="Leg Curl", order=1, prescription_json={"sets": 3, "reps": "12"})],
        ),
        TemplateBlock(
            title="Main",
            order=1,
            exercises=[
                TemplateExercise(name="Romanian Deadlift", order=2, prescription_json={"sets": 3, "reps": "8"}),
                TemplateExercise(
                    name="Back Squat",
                    order=1,
                    prescription_json={"sets": 5, "reps": "5", "weight": "80% 1RM"},
                    notes="Brace hard",
                ),
            ],
        ),
    ]
    s.add(template)
    s.flush()
    return template


def add_custom(s: Session, coach_id: str, title: str = "Leg Day") -> CustomWorkout:
    template = add_template(s, title=title)
    return clone_template(s, template.id, coach_id)
