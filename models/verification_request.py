"""VerificationRequest model definition."""

import enum

from . import db, enum_values, utcnow


class VerificationStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"


class VerificationRequest(db.Model):
    """A mechanic's request to be promoted to verified status."""

    __tablename__ = "verification_requests"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer,
        db.ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    proof_type = db.Column(db.String(64), nullable=False, default="general")
    credentials = db.Column(db.Text, nullable=False)
    status = db.Column(
        db.Enum(
            VerificationStatus,
            name="verification_status",
            values_callable=enum_values,
        ),
        nullable=False,
        default=VerificationStatus.PENDING,
        server_default=db.text("'pending'"),
        index=True,
    )
    reviewer_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    review_note = db.Column(db.Text, nullable=True)
    created_at = db.Column(
        db.DateTime,
        nullable=False,
        default=utcnow,
        server_default=db.func.now(),
    )
    reviewed_at = db.Column(db.DateTime, nullable=True)

    user = db.relationship(
        "User",
        foreign_keys=[user_id],
        backref=db.backref("verification_requests", lazy="dynamic"),
    )

    @property
    def is_resolved(self) -> bool:
        return self.status != VerificationStatus.PENDING

    def __repr__(self) -> str:
        return (
            f"<VerificationRequest id={self.id} user_id={self.user_id} "
            f"status={self.status.value}>"
        )

    def to_dict(self) -> dict:
        """Serialize the verification request into a dictionary."""

        return {
            "id": self.id,
            "user_id": self.user_id,
            "username": self.user.username if self.user else None,
            "proof_type": self.proof_type,
            "credentials": self.credentials,
            "status": self.status.value,
            "reviewer_id": self.reviewer_id,
            "review_note": self.review_note,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "reviewed_at": self.reviewed_at.isoformat() if self.reviewed_at else None,
        }
