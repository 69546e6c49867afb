"""Comment model."""

from . import db, utcnow


class Comment(db.Model):
    """A reply to a post, optionally nested under another comment."""

    __tablename__ = "comments"

    id = db.Column(db.Integer, primary_key=True)
    post_id = db.Column(db.Integer, db.ForeignKey("posts.id"), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    parent_id = db.Column(
        db.Integer, db.ForeignKey("comments.id"), nullable=True, index=True
    )
    body = db.Column(db.Text, nullable=False)
    score = db.Column(db.Integer, nullable=False, default=0, server_default="0")
    is_removed = db.Column(
        db.Boolean, nullable=False, default=False, server_default=db.text("false")
    )
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    post = db.relationship("Post", back_populates="comments")
    author = db.relationship("User", backref=db.backref("comments", lazy="dynamic"))

    def to_dict(self, redact_removed: bool = True) -> dict:
        hidden = self.is_removed and redact_removed
        return {
            "id": self.id,
            "post_id": self.post_id,
            "parent_id": self.parent_id,
            "user_id": None if hidden else self.user_id,
            "username": None if hidden or not self.author else self.author.username,
            "body": "[removed]" if hidden else self.body,
            "score": self.score,
            "is_removed": self.is_removed,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
