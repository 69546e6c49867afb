"""Vote model."""

import enum

from . import db, enum_values


class TargetType(str, enum.Enum):
    """Kinds of content that can be voted on or reported."""

    POST = "post"
    COMMENT = "comment"


class Vote(db.Model):
    """One member's current vote on one post or comment.

    The composite primary key makes (voter, target) unique; a retracted
    vote has no row at all.
    """

    __tablename__ = "votes"
    __table_args__ = (
        db.CheckConstraint("value IN (-1, 1)", name="ck_votes_value"),
        db.Index("ix_votes_target", "target_type", "target_id"),
    )

    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), primary_key=True)
    target_type = db.Column(
        db.Enum(TargetType, name="vote_target_type", values_callable=enum_values),
        primary_key=True,
    )
    target_id = db.Column(db.Integer, primary_key=True)
    value = db.Column(db.Integer, nullable=False)

    def __repr__(self) -> str:
        return (
            f"<Vote user_id={self.user_id} {self.target_type.value}={self.target_id} "
            f"value={self.value}>"
        )
