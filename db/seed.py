"""Seed the exercise library and premade workout templates.

Usage: ``python -m db.seed [--migrate]``. Safe to run repeatedly; rows that
already exist by name are left alone.
"""
from __future__ import annotations

import argparse

from alembic import command
from alembic.config import Config

from api.observability import configure_logging
from core.bootstrap import ensure_seeded
from core.db import session_scope


def run_migrations() -> None:
    cfg = Config("alembic.ini")
    command.upgrade(cfg, "head")


def seed_catalog() -> None:
    with session_scope() as s:
        report = ensure_seeded(s)
    print(f"Seeding complete: {report.exercises_created} exercises, {report.templates_created} templates added")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Seed the workout catalog")
    parser.add_argument("--migrate", action="store_true", help="run alembic upgrade head first")
    args = parser.parse_args(argv)
    configure_logging()
    if args.migrate:
        run_migrations()
    seed_catalog()


if __name__ == "__main__":
    main()
