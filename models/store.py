"""Store directory models."""

from . import db, utcnow


class Store(db.Model):
    """A parts retailer submitted by the community."""

    __tablename__ = "stores"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), unique=True, nullable=False)
    url = db.Column(db.String(512), nullable=False)
    category = db.Column(db.String(64), nullable=False, index=True)
    submitted_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    submitter = db.relationship("User", backref=db.backref("stores", lazy="dynamic"))
    votes = db.relationship(
        "StoreVote",
        back_populates="store",
        cascade="all, delete-orphan",
        lazy="dynamic",
    )

    def vote_counts(self) -> tuple[int, int]:
        """Return ``(positive, total)`` from the store's vote rows."""

        total = self.votes.count()
        positive = self.votes.filter_by(positive=True).count()
        return positive, total

    def reliability_score(self) -> float | None:
        """Share of positive votes, or ``None`` when nobody has voted."""

        positive, total = self.vote_counts()
        if total == 0:
            return None
        return positive / total

    def to_dict(self) -> dict:
        positive, total = self.vote_counts()
        score = positive / total if total else None
        return {
            "id": self.id,
            "name": self.name,
            "url": self.url,
            "category": self.category,
            "submitted_by": self.submitted_by,
            "submitter_name": self.submitter.username if self.submitter else None,
            "positive_votes": positive,
            "total_votes": total,
            "reliability_score": score,
            "reliability": f"{score * 100:.0f}%" if score is not None else "no ratings",
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class StoreVote(db.Model):
    """A member's thumbs up or down on a store, one per (store, voter)."""

    __tablename__ = "store_votes"

    store_id = db.Column(db.Integer, db.ForeignKey("stores.id"), primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), primary_key=True)
    positive = db.Column(db.Boolean, nullable=False)

    store = db.relationship("Store", back_populates="votes")
