from __future__ import annotations

from collections.abc import Iterator

from sqlalchemy.orm import Session

from core.db import session_scope


def get_db() -> Iterator[Session]:
    """Request-scoped unit of work. A failing request leaves no partial writes."""
    with session_scope() as session:
        yield session
