"""Up/down votes on posts and comments."""

from __future__ import annotations

from flask import current_app
from sqlalchemy import func

from models import db
from models.comment import Comment
from models.post import Post
from models.user import User
from models.vote import Vote

from . import lock, transaction
from .content import Content, target_type_of
from .errors import SelfVoteForbidden, TargetRemoved, ValidationError
from .permissions import Action, require

VOTE_VALUES = (-1, 0, 1)


def _vote_key(voter: User, target: Content) -> tuple[int, object, int]:
    return voter.id, target_type_of(target), target.id


def score_of(target: Content) -> int:
    """Sum of the target's current votes, read from the vote rows."""

    total = (
        db.session.query(func.coalesce(func.sum(Vote.value), 0))
        .filter(Vote.target_type == target_type_of(target), Vote.target_id == target.id)
        .scalar()
    )
    return int(total)


def vote_of(voter: User, target: Content) -> int:
    """Return the voter's current value on ``target`` (0 when none)."""

    vote = db.session.get(Vote, _vote_key(voter, target))
    return vote.value if vote is not None else 0


def cast_vote(voter: User, target: Content, value: int) -> int:
    """Record ``voter``'s vote and return the target's new score.

    ``0`` retracts; repeating the current value changes nothing. The vote
    row and the cached score are written in the same transaction.
    """

    require(voter, Action.VOTE_CONTENT)
    if isinstance(value, bool) or value not in VOTE_VALUES:
        raise ValidationError("Vote value must be -1, 0 or 1.")
    if target.user_id == voter.id:
        raise SelfVoteForbidden()

    with transaction() as session:
        # Serializes concurrent votes on the same target.
        lock(target)
        if target.is_removed:
            raise TargetRemoved()
        if isinstance(target, Comment) and target.post.is_removed:
            raise TargetRemoved("The post this comment belongs to has been removed.")

        key = _vote_key(voter, target)
        existing = session.get(Vote, key)
        current = existing.value if existing is not None else 0
        if current == value:
            return target.score

        if value == 0:
            session.delete(existing)
        elif existing is None:
            session.add(
                Vote(user_id=key[0], target_type=key[1], target_id=key[2], value=value)
            )
        else:
            existing.value = value

        session.flush()
        target.score = score_of(target)
        new_score = target.score

    current_app.logger.info(
        "User %s voted %s on %s %s (score=%s)",
        voter.id,
        value,
        target_type_of(target).value,
        target.id,
        new_score,
    )
    return new_score


def recount_scores() -> int:
    """Rewrite every cached score from the vote rows.

    Returns the number of rows that were out of date.
    """

    fixed = 0
    with transaction():
        for model in (Post, Comment):
            for item in model.query.all():
                actual = score_of(item)
                if item.score != actual:
                    current_app.logger.warning(
                        "Cached score for %s %s was %s, expected %s",
                        model.__tablename__,
                        item.id,
                        item.score,
                        actual,
                    )
                    item.score = actual
                    fixed += 1
    return fixed
