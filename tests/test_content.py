"""Service tests for categories, posts and comment threads."""

from __future__ import annotations

import pytest

from models import db
from models.comment import Comment
from models.moderation_log import ModerationLog
from models.user import Role
from services import content
from services.errors import (
    AlreadyRemoved,
    CommentCycle,
    Conflict,
    CrossPostReply,
    EmptyTitle,
    NotFound,
    NotRemoved,
    PermissionDenied,
    PostRemoved,
    TargetRemoved,
    UnknownCategory,
    UnknownParent,
    ValidationError,
)


@pytest.fixture()
def mechanic(make_user):
    return make_user(Role.VERIFIED_MECHANIC)


@pytest.fixture()
def post(mechanic, category):
    return content.create_post(mechanic, category, "Misfire on cyl 3", "Swapped coils, still there.")


def test_role_gate_on_create_post(make_user, category):
    """Unverified members cannot post; verified mechanics can."""

    with pytest.raises(PermissionDenied):
        content.create_post(make_user(), category, "Hello", "First post")

    post = content.create_post(make_user(Role.VERIFIED_MECHANIC), category, "Hello", "First post")
    assert post.id is not None
    assert post.score == 0
    assert post.is_removed is False


def test_create_post_validation(mechanic, category):
    with pytest.raises(EmptyTitle):
        content.create_post(mechanic, category, "   ", "body")
    with pytest.raises(ValidationError):
        content.create_post(mechanic, category, "x" * 301, "body")
    with pytest.raises(ValidationError):
        content.create_post(mechanic, category, "Title", "")
    with pytest.raises(UnknownCategory):
        content.create_post(mechanic, 9999, "Title", "body")
    with pytest.raises(UnknownCategory):
        content.create_post(mechanic, "no-such-slug", "Title", "body")


def test_category_lookup_and_creation(make_user, category):
    admin = make_user(Role.ADMIN)

    assert content.get_category("ENGINE").id == category.id
    assert content.get_category(category.id) is category

    created = content.create_category(admin, "Electrical", "Electrical", "Wiring", 1)
    assert created.slug == "electrical"
    assert [c.slug for c in content.list_categories()] == ["engine", "electrical"]

    with pytest.raises(Conflict):
        content.create_category(admin, "Again", "electrical")
    with pytest.raises(PermissionDenied):
        content.create_category(make_user(Role.MODERATOR), "Mods", "mods")


def test_list_posts_new_and_top_ordering(mechanic, category):
    first = content.create_post(mechanic, category, "First", "a")
    second = content.create_post(mechanic, category, "Second", "b")
    third = content.create_post(mechanic, category, "Third", "c")

    first.score = 5
    second.score = 2
    third.score = 2
    db.session.commit()

    assert [p.id for p in content.list_posts()] == [third.id, second.id, first.id]
    # Ties on score go to the most recent post.
    assert [p.id for p in content.list_posts(sort="top")] == [first.id, third.id, second.id]
    assert [p.id for p in content.list_posts(sort="top", limit=1, offset=1)] == [third.id]


def test_list_posts_is_lazy_and_restartable(mechanic, category):
    content.create_post(mechanic, category, "One", "a")

    listing = content.list_posts(category="engine")
    assert not isinstance(listing, list)
    assert len(list(listing)) == 1
    assert list(listing) == []

    assert len(list(content.list_posts(category=category))) == 1

    with pytest.raises(ValidationError):
        content.list_posts(sort="hot")


def test_removed_post_hidden_but_kept_for_moderators(make_user, mechanic, post):
    """Removal only flips visibility; the score survives for moderators."""

    moderator = make_user(Role.MODERATOR)
    post.score = 7
    db.session.commit()

    content.remove_post(moderator, post)

    assert post.id not in [p.id for p in content.list_posts()]
    with pytest.raises(NotFound):
        content.get_post(post.id, mechanic)
    visible = content.get_post(post.id, moderator)
    assert visible.is_removed is True
    assert visible.score == 7
    assert post in content.posts_by_user(mechanic, moderator)

    with pytest.raises(AlreadyRemoved):
        content.remove_post(moderator, post)

    content.restore_post(moderator, post)
    assert post.id in [p.id for p in content.list_posts()]
    with pytest.raises(NotRemoved):
        content.restore_post(moderator, post)

    actions = [entry.action for entry in ModerationLog.query.order_by(ModerationLog.id)]
    assert actions == ["remove_post", "restore_post"]


def test_authors_can_remove_their_own_content(make_user, mechanic, post):
    stranger = make_user(Role.VERIFIED_MECHANIC)

    with pytest.raises(PermissionDenied):
        content.remove_post(stranger, post)
    with pytest.raises(PermissionDenied):
        content.restore_post(mechanic, post)

    content.remove_post(mechanic, post)
    assert post.is_removed is True
    assert ModerationLog.query.one().action == "delete_post"


def test_edit_only_by_author_or_moderator(make_user, mechanic, post):
    edited = content.edit_post(mechanic, post, "Misfire on cyl 3 (solved)", "Injector.")
    assert edited.title == "Misfire on cyl 3 (solved)"

    with pytest.raises(PermissionDenied):
        content.edit_post(make_user(Role.VERIFIED_MECHANIC), post, "Hijack", "x")

    content.edit_post(make_user(Role.MODERATOR), post, "Tidied title", "Injector.")
    assert post.title == "Tidied title"


def test_comment_threading(make_user, mechanic, post):
    member = make_user()
    root = content.create_comment(member, post, None, "Check the plug wire.")
    reply = content.create_comment(mechanic, post, root, "Already did.")
    nested = content.create_comment(member, post, reply.id, "Compression test?")
    second_root = content.create_comment(mechanic, post, None, "Update soon.")

    root.score = 1
    db.session.commit()

    thread = content.get_thread(post)
    assert [node.comment.id for node in thread.comments] == [root.id, second_root.id]
    assert [node.comment.id for node in thread.comments[0].replies] == [reply.id]
    assert thread.comments[0].replies[0].replies[0].comment.id == nested.id

    payload = thread.to_dict()
    assert payload["post"]["comment_count"] == 4
    assert payload["comments"][0]["replies"][0]["body"] == "Already did."


def test_comment_parent_rules(make_user, mechanic, category, post):
    member = make_user()
    other_post = content.create_post(mechanic, category, "Other", "thread")
    foreign = content.create_comment(member, other_post, None, "elsewhere")

    with pytest.raises(CrossPostReply):
        content.create_comment(member, post, foreign, "wrong thread")
    with pytest.raises(UnknownParent):
        content.create_comment(member, post, 424242, "ghost")
    with pytest.raises(ValidationError):
        content.create_comment(member, post, None, "   ")

    moderator = make_user(Role.MODERATOR)
    parent = content.create_comment(member, post, None, "spam")
    content.remove_comment(moderator, parent)
    with pytest.raises(TargetRemoved):
        content.create_comment(member, post, parent, "reply to spam")

    content.remove_post(moderator, post)
    with pytest.raises(PostRemoved):
        content.create_comment(member, post, None, "late")


def test_removed_comments_stay_as_tombstones(make_user, post):
    member = make_user()
    moderator = make_user(Role.MODERATOR)
    parent = content.create_comment(member, post, None, "rude remark")
    child = content.create_comment(make_user(), post, parent, "still useful")

    content.remove_comment(moderator, parent)

    thread = content.get_thread(post)
    public = thread.to_dict()
    assert public["comments"][0]["body"] == "[removed]"
    assert public["comments"][0]["username"] is None
    assert public["comments"][0]["replies"][0]["id"] == child.id
    assert thread.to_dict(redact_removed=False)["comments"][0]["body"] == "rude remark"


def test_parent_cycle_is_an_integrity_error(make_user, post):
    member = make_user()
    a = content.create_comment(member, post, None, "a")
    b = content.create_comment(member, post, a, "b")

    # Corrupt the stored links so a and b point at each other.
    a.parent_id = b.id
    db.session.commit()

    with pytest.raises(CommentCycle):
        content.get_thread(post)
    with pytest.raises(CommentCycle):
        content.create_comment(member, post, b, "c")


def test_orphaned_parent_is_an_integrity_error(make_user, post):
    member = make_user()
    comment = content.create_comment(member, post, None, "a")
    db.session.get(Comment, comment.id).parent_id = 987654
    db.session.commit()

    with pytest.raises(CommentCycle):
        content.get_thread(post)


def test_member_history_includes_removed_items_for_owner(make_user, mechanic, post):
    moderator = make_user(Role.MODERATOR)
    stranger = make_user()
    kept = content.create_comment(mechanic, post, None, "Also checked the plugs.")
    other = content.create_post(mechanic, post.category, "Idle hunt", "Vacuum leak?")
    reply = content.create_comment(mechanic, other, None, "Smoke test found it.")
    content.remove_post(moderator, post)
    content.remove_comment(moderator, reply)

    assert content.posts_by_user(mechanic, mechanic) == [other, post]
    assert content.posts_by_user(mechanic, stranger) == [other]
    assert content.posts_by_user(mechanic) == [other]

    assert content.comments_by_user(mechanic, mechanic) == [reply, kept]
    assert content.comments_by_user(mechanic, moderator) == [reply, kept]
    assert content.comments_by_user(mechanic, stranger) == []


def test_search_posts_skips_removed_and_ignores_case(make_user, mechanic, post):
    other = content.create_post(mechanic, post.category, "Coil pack swap", "Cheap MISFIRE fix.")
    content.create_post(mechanic, post.category, "Oil weight", "5w30 or 0w20?")

    assert {p.id for p in content.search_posts("misfire")} == {post.id, other.id}

    content.remove_post(make_user(Role.MODERATOR), post)
    assert content.search_posts("MISFIRE") == [other]
    assert content.search_posts("misfire", limit=0) == []
    with pytest.raises(ValidationError):
        content.search_posts("")
