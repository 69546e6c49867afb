"""Post model."""

from . import db, utcnow


class Post(db.Model):
    """A top-level discussion started by a verified member."""

    __tablename__ = "posts"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    category_id = db.Column(
        db.Integer, db.ForeignKey("categories.id"), nullable=False, index=True
    )
    title = db.Column(db.String(300), nullable=False)
    body = db.Column(db.Text, nullable=False)
    # Cached sum of the post's votes; recomputed with every vote.
    score = db.Column(db.Integer, nullable=False, default=0, server_default="0")
    is_removed = db.Column(
        db.Boolean, nullable=False, default=False, server_default=db.text("false")
    )
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    author = db.relationship("User", backref=db.backref("posts", lazy="dynamic"))
    category = db.relationship("Category", backref=db.backref("posts", lazy="dynamic"))
    comments = db.relationship("Comment", back_populates="post", lazy="dynamic")

    def to_dict(self) -> dict:
        """Serialize the post."""

        return {
            "id": self.id,
            "user_id": self.user_id,
            "username": self.author.username if self.author else None,
            "category_id": self.category_id,
            "category_slug": self.category.slug if self.category else None,
            "title": self.title,
            "body": self.body,
            "score": self.score,
            "is_removed": self.is_removed,
            "comment_count": self.comments.filter_by(is_removed=False).count(),
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
