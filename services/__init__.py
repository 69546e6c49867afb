"""Forum domain services.

Every function here takes the acting user explicitly and runs its writes
inside :func:`transaction`, so callers never observe half-applied changes.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, TypeVar

from sqlalchemy.orm import Session

from models import ModerationLog, User, db

from .errors import NotFound

ModelT = TypeVar("ModelT")


def fetch(
    model: type[ModelT],
    ident: int | None,
    error: type[NotFound] = NotFound,
    message: str | None = None,
) -> ModelT:
    """Load a row by primary key or raise ``error``."""

    instance = db.session.get(model, ident) if ident is not None else None
    if instance is None:
        raise error(message)
    return instance


def lock(instance) -> None:
    """Reload ``instance`` with a row lock so concurrent writers serialize."""

    db.session.refresh(instance, with_for_update=True)


@contextmanager
def transaction() -> Iterator[Session]:
    """Commit the session on success, roll everything back on any error."""

    session = db.session
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise


def record_action(
    actor: User,
    action: str,
    target_type: str | None = None,
    target_id: int | None = None,
    detail: str | None = None,
) -> ModerationLog:
    """Append an audit entry inside the caller's transaction."""

    entry = ModerationLog(
        actor_id=actor.id,
        action=action,
        target_type=target_type,
        target_id=target_id,
        detail=detail,
    )
    db.session.add(entry)
    return entry
