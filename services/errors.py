"""Domain errors raised by the service layer.

Each error subclasses the werkzeug HTTP exception matching its kind, so the
application's JSON error handler renders them without any per-route
translation. ``reason`` is a stable machine-readable tag for clients.
"""

from __future__ import annotations

from werkzeug.exceptions import (
    BadRequest,
    Conflict as _Conflict,
    Forbidden,
    NotFound as _NotFound,
    Unauthorized,
    UnprocessableEntity,
)


class ForumError(Exception):
    """Mixin carrying the machine-readable ``reason`` tag."""

    reason = "error"
    message = "The request could not be completed."

    def __init__(self, description: str | None = None) -> None:
        super().__init__(description or self.message)


class PermissionDenied(ForumError, Forbidden):
    reason = "permission_denied"
    message = "You do not have permission to do that."


class NotAdmin(PermissionDenied):
    reason = "not_admin"
    message = "Admin privileges required."


class SelfVoteForbidden(PermissionDenied):
    reason = "self_vote_forbidden"
    message = "You cannot vote on your own content."


class CannotBanAdmin(PermissionDenied):
    reason = "cannot_ban_admin"
    message = "Admins can only be banned by another admin."


class NotFound(ForumError, _NotFound):
    reason = "not_found"
    message = "The requested item was not found."


class UnknownCategory(NotFound):
    reason = "unknown_category"
    message = "Category not found."


class UnknownParent(NotFound):
    reason = "unknown_parent"
    message = "Parent comment not found."


class Conflict(ForumError, _Conflict):
    reason = "conflict"
    message = "The request conflicts with the current state."


class DuplicateEmail(Conflict):
    reason = "duplicate_email"
    message = "Email already registered."


class DuplicateUsername(Conflict):
    reason = "duplicate_username"
    message = "Username already taken."


class DuplicateName(Conflict):
    reason = "duplicate_name"
    message = "A store with that name already exists."


class AlreadyVerified(Conflict):
    reason = "already_verified"
    message = "You are already verified."


class PendingRequestExists(Conflict):
    reason = "pending_request_exists"
    message = "You already have a pending verification request."


class AlreadyResolved(Conflict):
    reason = "already_resolved"
    message = "This item has already been resolved."


class AlreadyRemoved(Conflict):
    reason = "already_removed"
    message = "This content has already been removed."


class NotRemoved(Conflict):
    reason = "not_removed"
    message = "This content is not removed."


class AlreadyBanned(Conflict):
    reason = "already_banned"
    message = "User is already banned."


class NotBanned(Conflict):
    reason = "not_banned"
    message = "User is not banned."


class PostRemoved(Conflict):
    reason = "post_removed"
    message = "This post has been removed."


class TargetRemoved(Conflict):
    reason = "target_removed"
    message = "This content has been removed."


class ValidationError(ForumError, BadRequest):
    reason = "validation_error"
    message = "The submitted data is invalid."


class WeakCredential(ValidationError):
    reason = "weak_credential"
    message = "Password is too short."


class EmptyTitle(ValidationError):
    reason = "empty_title"
    message = "Title must not be empty."


class EmptyReason(ValidationError):
    reason = "empty_reason"
    message = "A reason is required."


class InvalidCredentials(ForumError, Unauthorized):
    reason = "invalid_credentials"
    message = "Invalid email or password."


class IntegrityViolation(ForumError, UnprocessableEntity):
    reason = "integrity_violation"
    message = "Stored data failed an integrity check."


class CrossPostReply(IntegrityViolation):
    reason = "cross_post_reply"
    message = "Parent comment belongs to a different post."


class CommentCycle(IntegrityViolation):
    code = 500
    reason = "comment_cycle"
    message = "Comment thread contains a broken parent chain."
