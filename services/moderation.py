"""Reports, the moderation queue, and bans."""

from __future__ import annotations

from flask import current_app

from models import utcnow
from models.moderation_log import ModerationLog
from models.report import Report, ReportAction, ReportStatus
from models.user import Role, User

from . import fetch, lock, record_action, transaction
from .content import Content, apply_removal, get_target, target_type_of
from .errors import (
    AlreadyBanned,
    AlreadyResolved,
    CannotBanAdmin,
    EmptyReason,
    NotBanned,
    NotFound,
    PermissionDenied,
    ValidationError,
)
from .permissions import Action, require


def report(reporter: User, target: Content, reason: str) -> Report:
    """File a report against a post or comment."""

    require(reporter, Action.REPORT)
    reason = (reason or "").strip()
    if not reason:
        raise EmptyReason()
    max_length = current_app.config.get("REPORT_REASON_MAX_LENGTH", 1000)
    if len(reason) > max_length:
        raise ValidationError(f"Reason must be at most {max_length} characters.")

    with transaction() as session:
        entry = Report(
            reporter_id=reporter.id,
            target_type=target_type_of(target),
            target_id=target.id,
            reason=reason,
        )
        session.add(entry)

    current_app.logger.info(
        "Report %s filed by user %s against %s %s",
        entry.id,
        reporter.id,
        entry.target_type.value,
        entry.target_id,
    )
    return entry


def get_report(report_id: int) -> Report:
    return fetch(Report, report_id, NotFound, "Report not found.")


def mod_queue(moderator: User) -> list[Report]:
    """Open reports, oldest first."""

    require(moderator, Action.MODERATE)
    return (
        Report.query.filter_by(status=ReportStatus.OPEN)
        .order_by(Report.created_at.asc(), Report.id.asc())
        .all()
    )


def resolve_report(
    moderator: User, entry: Report, action: ReportAction | str
) -> Report:
    """Close a report, optionally removing what it points at.

    Removal and resolution commit together or not at all.
    """

    require(moderator, Action.MODERATE)
    try:
        action = ReportAction(action)
    except ValueError:
        raise ValidationError("Action must be 'dismiss' or 'remove_target'.") from None

    with transaction():
        lock(entry)
        if entry.status is ReportStatus.RESOLVED:
            raise AlreadyResolved("This report was already resolved.")

        if action is ReportAction.REMOVE_TARGET:
            target = get_target(entry.target_type, entry.target_id)
            # A target removed through another report still closes this one.
            if not target.is_removed:
                apply_removal(moderator, target)

        entry.status = ReportStatus.RESOLVED
        entry.resolution = action
        entry.resolved_by = moderator.id
        entry.resolved_at = utcnow()
        record_action(moderator, "resolve_report", "report", entry.id, action.value)

    current_app.logger.info(
        "Report %s resolved by moderator %s (%s)", entry.id, moderator.id, action.value
    )
    return entry


def _check_ban_target(moderator: User, user: User) -> None:
    require(moderator, Action.MODERATE)
    if user.id == moderator.id:
        raise PermissionDenied("You cannot ban yourself.")
    if user.role is Role.ADMIN and moderator.role is not Role.ADMIN:
        raise CannotBanAdmin()


def ban(moderator: User, user: User, reason: str | None = None) -> User:
    """Ban a member. Their existing content stays up."""

    _check_ban_target(moderator, user)
    with transaction():
        lock(user)
        if user.is_banned:
            raise AlreadyBanned()
        user.is_banned = True
        record_action(moderator, "ban_user", "user", user.id, reason)

    current_app.logger.info("User %s banned by moderator %s", user.id, moderator.id)
    return user


def unban(moderator: User, user: User) -> User:
    _check_ban_target(moderator, user)
    with transaction():
        lock(user)
        if not user.is_banned:
            raise NotBanned()
        user.is_banned = False
        record_action(moderator, "unban_user", "user", user.id)

    current_app.logger.info("User %s unbanned by moderator %s", user.id, moderator.id)
    return user


def banned_users(moderator: User) -> list[User]:
    require(moderator, Action.MODERATE)
    return User.query.filter_by(is_banned=True).order_by(User.created_at.desc()).all()


def moderation_log(admin: User, limit: int = 100) -> list[ModerationLog]:
    """Most recent audit entries first."""

    require(admin, Action.ADMINISTER)
    return (
        ModerationLog.query.order_by(
            ModerationLog.created_at.desc(), ModerationLog.id.desc()
        )
        .limit(limit)
        .all()
    )
