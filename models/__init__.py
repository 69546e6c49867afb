"""Database initialization and model exports."""

from datetime import UTC, datetime

from flask_sqlalchemy import SQLAlchemy


db = SQLAlchemy()


def utcnow() -> datetime:
    """Return the current UTC time as a naive datetime for storage."""

    return datetime.now(UTC).replace(tzinfo=None)


def enum_values(enum_cls) -> list[str]:
    """Persist enum members by value rather than by name."""

    return [member.value for member in enum_cls]


# Import models to register them with SQLAlchemy metadata.
from .user import Role, User  # noqa: E402,F401
from .verification_request import (  # noqa: E402,F401
    VerificationRequest,
    VerificationStatus,
)
from .category import Category  # noqa: E402,F401
from .post import Post  # noqa: E402,F401
from .comment import Comment  # noqa: E402,F401
from .vote import TargetType, Vote  # noqa: E402,F401
from .report import Report, ReportAction, ReportStatus  # noqa: E402,F401
from .store import Store, StoreVote  # noqa: E402,F401
from .moderation_log import ModerationLog  # noqa: E402,F401

__all__ = [
    "db",
    "utcnow",
    "Role",
    "User",
    "VerificationRequest",
    "VerificationStatus",
    "Category",
    "Post",
    "Comment",
    "TargetType",
    "Vote",
    "Report",
    "ReportAction",
    "ReportStatus",
    "Store",
    "StoreVote",
    "ModerationLog",
]
