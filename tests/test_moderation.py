"""Service tests for reports, the moderation queue and bans."""

from __future__ import annotations

import pytest

from models import db
from models.moderation_log import ModerationLog
from models.post import Post
from models.report import Report, ReportAction, ReportStatus
from models.user import Role
from services import content, moderation
from services.errors import (
    AlreadyBanned,
    AlreadyResolved,
    CannotBanAdmin,
    EmptyReason,
    NotAdmin,
    NotBanned,
    PermissionDenied,
    ValidationError,
)


@pytest.fixture()
def moderator(make_user):
    return make_user(Role.MODERATOR)


@pytest.fixture()
def post(make_user, category):
    return content.create_post(
        make_user(Role.VERIFIED_MECHANIC), category, "Cheap tools", "Buy my tools!"
    )


def test_report_requires_reason(make_user, post):
    reporter = make_user()

    with pytest.raises(EmptyReason):
        moderation.report(reporter, post, "   ")
    with pytest.raises(ValidationError):
        moderation.report(reporter, post, "x" * 1001)
    with pytest.raises(PermissionDenied):
        moderation.report(make_user(banned=True), post, "spam")

    entry = moderation.report(reporter, post, "spam")
    assert entry.status is ReportStatus.OPEN
    assert entry.target_id == post.id


def test_queue_is_oldest_first_and_moderator_only(make_user, moderator, post):
    reporter = make_user()
    first = moderation.report(reporter, post, "spam")
    comment = content.create_comment(reporter, post, None, "also spam")
    second = moderation.report(make_user(), comment, "spam reply")

    assert [r.id for r in moderation.mod_queue(moderator)] == [first.id, second.id]
    with pytest.raises(PermissionDenied):
        moderation.mod_queue(reporter)

    moderation.resolve_report(moderator, first, ReportAction.DISMISS)
    assert [r.id for r in moderation.mod_queue(moderator)] == [second.id]


def test_resolve_with_removal_updates_both(make_user, moderator, post):
    entry = moderation.report(make_user(), post, "spam")

    moderation.resolve_report(moderator, entry, "remove_target")

    db.session.expire_all()
    assert db.session.get(Post, post.id).is_removed is True
    stored = db.session.get(Report, entry.id)
    assert stored.status is ReportStatus.RESOLVED
    assert stored.resolution is ReportAction.REMOVE_TARGET
    assert stored.resolved_by == moderator.id

    with pytest.raises(AlreadyResolved):
        moderation.resolve_report(moderator, entry, "dismiss")

    actions = {log.action for log in ModerationLog.query.all()}
    assert actions == {"remove_post", "resolve_report"}


def test_failed_resolution_leaves_nothing_half_done(make_user, moderator, post, monkeypatch):
    """If the resolution step fails, the removal is rolled back with it."""

    entry = moderation.report(make_user(), post, "spam")

    def _explode(*args, **kwargs):
        raise RuntimeError("storage went away")

    monkeypatch.setattr(moderation, "utcnow", _explode)

    with pytest.raises(RuntimeError):
        moderation.resolve_report(moderator, entry, ReportAction.REMOVE_TARGET)

    db.session.expire_all()
    assert db.session.get(Post, post.id).is_removed is False
    assert db.session.get(Report, entry.id).status is ReportStatus.OPEN
    assert ModerationLog.query.count() == 0


def test_second_report_on_removed_target_still_resolves(make_user, moderator, post):
    first = moderation.report(make_user(), post, "spam")
    second = moderation.report(make_user(), post, "spam again")

    moderation.resolve_report(moderator, first, ReportAction.REMOVE_TARGET)
    resolved = moderation.resolve_report(moderator, second, ReportAction.REMOVE_TARGET)

    assert resolved.status is ReportStatus.RESOLVED
    assert moderation.mod_queue(moderator) == []


def test_invalid_resolution_action(make_user, moderator, post):
    entry = moderation.report(make_user(), post, "spam")

    with pytest.raises(ValidationError):
        moderation.resolve_report(moderator, entry, "nuke")


def test_ban_blocks_writes_until_unban(make_user, moderator, post):
    """A banned member cannot comment until a moderator lifts the ban."""

    member = make_user()
    moderation.ban(moderator, member, "spamming")

    assert member.is_banned is True
    assert moderation.banned_users(moderator) == [member]
    with pytest.raises(PermissionDenied):
        content.create_comment(member, post, None, "let me back in")
    with pytest.raises(AlreadyBanned):
        moderation.ban(moderator, member)

    moderation.unban(moderator, member)
    comment = content.create_comment(member, post, None, "sorry")
    assert comment.id is not None
    with pytest.raises(NotBanned):
        moderation.unban(moderator, member)


def test_ban_hierarchy(make_user, moderator):
    admin = make_user(Role.ADMIN)
    other_admin = make_user(Role.ADMIN)

    with pytest.raises(CannotBanAdmin):
        moderation.ban(moderator, admin)
    with pytest.raises(PermissionDenied):
        moderation.ban(moderator, moderator)
    with pytest.raises(PermissionDenied):
        moderation.ban(make_user(Role.VERIFIED_MECHANIC), make_user())

    moderation.ban(other_admin, admin)
    assert admin.is_banned is True


def test_moderation_log_is_admin_only(make_user, moderator):
    admin = make_user(Role.ADMIN)
    member = make_user()
    moderation.ban(moderator, member)
    moderation.unban(moderator, member)

    entries = moderation.moderation_log(admin)
    assert [entry.action for entry in entries] == ["unban_user", "ban_user"]
    assert len(moderation.moderation_log(admin, limit=1)) == 1
    with pytest.raises(NotAdmin):
        moderation.moderation_log(moderator)
