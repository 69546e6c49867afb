"""Community parts-store directory and reliability ratings."""

from __future__ import annotations

from urllib.parse import urlparse

from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from models import db
from models.store import Store, StoreVote
from models.user import User

from . import fetch, lock, transaction
from .errors import DuplicateName, NotFound, ValidationError
from .permissions import Action, require

DEFAULT_CATEGORY = "General"


def _clean_url(url: str | None) -> str:
    url = (url or "").strip()
    parsed = urlparse(url)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise ValidationError("Store URL must be an http(s) address.")
    return url


def get_store(store_id: int) -> Store:
    return fetch(Store, store_id, NotFound, "Store not found.")


def _name_taken(name: str) -> bool:
    return Store.query.filter(func.lower(Store.name) == name.lower()).first() is not None


def submit_store(user: User, name: str, url: str, category: str | None = None) -> Store:
    """Add a store to the directory."""

    require(user, Action.SUBMIT_STORE)
    name = (name or "").strip()
    if not name:
        raise ValidationError("Store name is required.")
    url = _clean_url(url)
    category = (category or "").strip() or DEFAULT_CATEGORY

    try:
        with transaction() as session:
            if _name_taken(name):
                raise DuplicateName()
            store = Store(name=name, url=url, category=category, submitted_by=user.id)
            session.add(store)
    except IntegrityError:
        # Another submission claimed the name first.
        raise DuplicateName() from None

    current_app.logger.info("Store %s submitted by user %s", store.id, user.id)
    return store


def reliability_score(store: Store) -> float | None:
    """Share of positive votes; ``None`` means the store has no ratings yet."""

    return store.reliability_score()


def rate_store(user: User, store: Store, positive: bool) -> float | None:
    """Record or replace ``user``'s rating and return the new score."""

    require(user, Action.VOTE_STORE)
    if not isinstance(positive, bool):
        raise ValidationError("positive must be a boolean.")

    with transaction() as session:
        lock(store)
        vote = session.get(StoreVote, (store.id, user.id))
        if vote is None:
            session.add(StoreVote(store_id=store.id, user_id=user.id, positive=positive))
        else:
            vote.positive = positive
        session.flush()
        score = reliability_score(store)

    current_app.logger.info(
        "User %s rated store %s %s", user.id, store.id, "up" if positive else "down"
    )
    return score


def list_stores(category: str | None = None) -> list[Store]:
    query = Store.query
    if category:
        query = query.filter(Store.category == category)
    return query.order_by(Store.name).all()


def store_categories() -> list[str]:
    """Known categories: configured defaults plus any submitted labels."""

    used = [row[0] for row in db.session.query(Store.category).distinct()]
    defaults = current_app.config.get("STORE_DEFAULT_CATEGORIES", ())
    return sorted(set(defaults) | set(used))


def search_stores(term: str, limit: int | None = None) -> list[Store]:
    """Stores whose name contains ``term``, ignoring case."""

    term = (term or "").strip()
    if not term:
        raise ValidationError("Search query must not be empty.")
    query = Store.query.filter(Store.name.icontains(term, autoescape=True)).order_by(
        Store.name
    )
    if limit is not None:
        query = query.limit(limit)
    return query.all()
