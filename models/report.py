"""Report model."""

import enum

from . import db, enum_values, utcnow
from .vote import TargetType


class ReportStatus(str, enum.Enum):
    OPEN = "open"
    RESOLVED = "resolved"


class ReportAction(str, enum.Enum):
    DISMISS = "dismiss"
    REMOVE_TARGET = "remove_target"


class Report(db.Model):
    """A member's complaint about a post or comment."""

    __tablename__ = "reports"

    id = db.Column(db.Integer, primary_key=True)
    reporter_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    target_type = db.Column(
        db.Enum(TargetType, name="report_target_type", values_callable=enum_values),
        nullable=False,
    )
    target_id = db.Column(db.Integer, nullable=False)
    reason = db.Column(db.Text, nullable=False)
    status = db.Column(
        db.Enum(ReportStatus, name="report_status", values_callable=enum_values),
        nullable=False,
        default=ReportStatus.OPEN,
        server_default=db.text("'open'"),
        index=True,
    )
    resolution = db.Column(
        db.Enum(ReportAction, name="report_action", values_callable=enum_values),
        nullable=True,
    )
    resolved_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    resolved_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)

    reporter = db.relationship("User", foreign_keys=[reporter_id])

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "reporter_id": self.reporter_id,
            "reporter_name": self.reporter.username if self.reporter else None,
            "target_type": self.target_type.value,
            "target_id": self.target_id,
            "reason": self.reason,
            "status": self.status.value,
            "resolution": self.resolution.value if self.resolution else None,
            "resolved_by": self.resolved_by,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
