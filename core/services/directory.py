"""Read-only collaborators: user directory, group roster, exercise library.

These tables are owned by other parts of the platform; the scheduling
engine only looks things up here.
"""

from __future__ import annotations

from typing import Iterable

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from core.models import AthleteGroup, AthleteGroupMember, Exercise, User

UNKNOWN_NAME = "Unknown"


def get_user(s: Session, user_id: str) -> User | None:
    return s.get(User, user_id)


def get_users(s: Session, user_ids: Iterable[str]) -> dict[str, User]:
    ids = {uid for uid in user_ids if uid}
    if not ids:
        return {}
    rows = s.execute(select(User).where(User.id.in_(ids))).scalars().all()
    return {u.id: u for u in rows}


def display_name(user: User | None) -> str:
    """'First Last' trimmed, else email, else 'Unknown'."""
    if user is None:
        return UNKNOWN_NAME
    full = f"{user.first_name or ''} {user.last_name or ''}".strip()
    if full:
        return full
    if user.email:
        return user.email
    return UNKNOWN_NAME


def get_group(s: Session, group_id: int) -> AthleteGroup | None:
    return s.get(AthleteGroup, group_id)


def get_group_members(s: Session, group_id: int) -> list[str]:
    """Current member athlete ids, in the order they joined."""
    rows = s.execute(
        select(AthleteGroupMember.athlete_id)
        .where(AthleteGroupMember.group_id == group_id)
        .order_by(AthleteGroupMember.id)
    ).scalars().all()
    return list(rows)


def find_exercise_by_id(s: Session, exercise_id: int) -> Exercise | None:
    return s.get(Exercise, exercise_id)


def find_exercise_by_name(s: Session, name: str) -> Exercise | None:
    key = (name or "").strip().lower()
    if not key:
        return None
    return s.execute(
        select(Exercise).where(func.lower(Exercise.name) == key).order_by(Exercise.id).limit(1)
    ).scalar_one_or_none()


def get_exercises(s: Session, exercise_ids: Iterable[int]) -> dict[int, Exercise]:
    ids = {eid for eid in exercise_ids if eid}
    if not ids:
        return {}
    rows = s.execute(select(Exercise).where(Exercise.id.in_(ids))).scalars().all()
    return {e.id: e for e in rows}
