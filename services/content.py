"""Categories, posts and threaded comments."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Iterator

from flask import current_app
from sqlalchemy import or_

from models import db
from models.category import Category
from models.comment import Comment
from models.post import Post
from models.user import User
from models.vote import TargetType

from . import fetch, lock, record_action, transaction
from .errors import (
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
from .permissions import Action, can_moderate, require

Content = Post | Comment


class PostSort(str, enum.Enum):
    NEW = "new"
    TOP = "top"


@dataclass
class CommentNode:
    comment: Comment
    replies: list["CommentNode"] = field(default_factory=list)

    def to_dict(self, redact_removed: bool = True) -> dict:
        data = self.comment.to_dict(redact_removed=redact_removed)
        data["replies"] = [reply.to_dict(redact_removed) for reply in self.replies]
        return data


@dataclass
class Thread:
    post: Post
    comments: list[CommentNode]

    def to_dict(self, redact_removed: bool = True) -> dict:
        return {
            "post": self.post.to_dict(),
            "comments": [node.to_dict(redact_removed) for node in self.comments],
        }


# ==================== Categories ====================


def list_categories() -> list[Category]:
    return Category.query.order_by(Category.sort_order, Category.name).all()


def get_category(category: Category | int | str | None) -> Category:
    """Resolve a category by instance, id or slug."""

    if isinstance(category, Category):
        return category
    if isinstance(category, str):
        found = Category.query.filter_by(slug=category.strip().lower()).first()
    elif category is not None:
        found = db.session.get(Category, category)
    else:
        found = None
    if found is None:
        raise UnknownCategory()
    return found


def create_category(
    admin: User, name: str, slug: str, description: str = "", sort_order: int = 0
) -> Category:
    require(admin, Action.ADMINISTER)
    name = (name or "").strip()
    slug = (slug or "").strip().lower()
    if not name or not slug:
        raise ValidationError("Category name and slug are required.")

    with transaction() as session:
        if Category.query.filter_by(slug=slug).first() is not None:
            raise Conflict(f"Category slug '{slug}' is already in use.")
        category = Category(
            name=name,
            slug=slug,
            description=(description or "").strip(),
            sort_order=sort_order,
        )
        session.add(category)
    return category


# ==================== Posts ====================


def _clean_title(title: str | None) -> str:
    title = (title or "").strip()
    if not title:
        raise EmptyTitle()
    max_length = current_app.config.get("POST_TITLE_MAX_LENGTH", 300)
    if len(title) > max_length:
        raise ValidationError(f"Title must be between 1 and {max_length} characters.")
    return title


def _clean_body(body: str | None, what: str) -> str:
    body = (body or "").strip()
    if not body:
        raise ValidationError(f"{what} cannot be empty.")
    return body


def create_post(author: User, category, title: str, body: str) -> Post:
    """Start a new discussion. Verified mechanics and above only."""

    require(author, Action.CREATE_POST)
    title = _clean_title(title)
    body = _clean_body(body, "Post body")
    category = get_category(category)

    with transaction() as session:
        post = Post(
            user_id=author.id,
            category_id=category.id,
            title=title,
            body=body,
            score=0,
        )
        session.add(post)

    current_app.logger.info("Post %s created by user %s", post.id, author.id)
    return post


def get_post(post_id: int, viewer: User | None = None) -> Post:
    """Load a post; removed posts are only visible to moderators."""

    post = fetch(Post, post_id, NotFound, "Post not found.")
    if post.is_removed and not can_moderate(viewer):
        raise NotFound("Post not found.")
    return post


def list_posts(
    category=None,
    sort: PostSort | str = PostSort.NEW,
    limit: int | None = None,
    offset: int = 0,
) -> Iterator[Post]:
    """Lazily yield visible posts.

    ``new`` orders by creation time, newest first. ``top`` orders by score
    with the newest post winning ties. Each call issues a fresh query.
    """

    try:
        sort = PostSort(sort)
    except ValueError:
        raise ValidationError("Sort must be 'new' or 'top'.") from None

    query = Post.query.filter(Post.is_removed.is_(False))
    if category is not None:
        query = query.filter(Post.category_id == get_category(category).id)

    if sort is PostSort.TOP:
        query = query.order_by(
            Post.score.desc(), Post.created_at.desc(), Post.id.desc()
        )
    else:
        query = query.order_by(Post.created_at.desc(), Post.id.desc())

    if offset:
        query = query.offset(offset)
    if limit is not None:
        query = query.limit(limit)
    return _stream(query)


def _stream(query) -> Iterator[Post]:
    yield from query


def sees_removed_history(user: User, viewer: User | None) -> bool:
    """Owners (banned or not) and moderators see removed items in a history."""

    return can_moderate(viewer) or (viewer is not None and viewer.id == user.id)


def posts_by_user(user: User, viewer: User | None = None) -> list[Post]:
    query = Post.query.filter_by(user_id=user.id)
    if not sees_removed_history(user, viewer):
        query = query.filter(Post.is_removed.is_(False))
    return query.order_by(Post.created_at.desc(), Post.id.desc()).all()


def search_posts(term: str, limit: int | None = None) -> list[Post]:
    """Visible posts whose title or body contains ``term``, case-insensitively."""

    term = (term or "").strip()
    if not term:
        raise ValidationError("Search query must not be empty.")
    query = Post.query.filter(
        Post.is_removed.is_(False),
        or_(
            Post.title.icontains(term, autoescape=True),
            Post.body.icontains(term, autoescape=True),
        ),
    ).order_by(Post.score.desc(), Post.created_at.desc(), Post.id.desc())
    if limit is not None:
        query = query.limit(limit)
    return query.all()


def _require_editor(user: User, item: Content) -> None:
    require(user, Action.EDIT_OWN)
    if item.user_id != user.id and not can_moderate(user):
        raise PermissionDenied("You can only edit your own content.")
    if item.is_removed:
        raise TargetRemoved("Removed content cannot be edited.")


def edit_post(user: User, post: Post, title: str, body: str) -> Post:
    _require_editor(user, post)
    title = _clean_title(title)
    body = _clean_body(body, "Post body")

    with transaction():
        post.title = title
        post.body = body
    return post


# ==================== Comments ====================


def get_comment(comment_id: int) -> Comment:
    return fetch(Comment, comment_id, NotFound, "Comment not found.")


def comments_by_user(user: User, viewer: User | None = None) -> list[Comment]:
    """A member's comments, newest first.

    Other viewers only see comments that are visible in their threads.
    """

    query = Comment.query.filter(Comment.user_id == user.id)
    if not sees_removed_history(user, viewer):
        query = query.join(Post, Comment.post_id == Post.id).filter(
            Comment.is_removed.is_(False), Post.is_removed.is_(False)
        )
    return query.order_by(Comment.created_at.desc(), Comment.id.desc()).all()


def _check_ancestry(post: Post, parent: Comment) -> None:
    """Walk the parent chain up to the root, refusing loops and strays."""

    seen: set[int] = set()
    node: Comment | None = parent
    while node is not None:
        if node.id in seen or node.post_id != post.id:
            current_app.logger.error(
                "Broken comment ancestry on post %s at comment %s", post.id, node.id
            )
            raise CommentCycle()
        seen.add(node.id)
        if node.parent_id is None:
            return
        node = db.session.get(Comment, node.parent_id)
        if node is None:
            current_app.logger.error(
                "Comment chain on post %s points at a missing parent", post.id
            )
            raise CommentCycle()


def create_comment(
    author: User,
    post: Post,
    parent_comment: Comment | int | None,
    body: str,
) -> Comment:
    """Reply to a post, or to a comment on the same post."""

    require(author, Action.CREATE_COMMENT)
    body = _clean_body(body, "Comment")
    if post.is_removed:
        raise PostRemoved()

    parent = None
    if parent_comment is not None:
        if isinstance(parent_comment, Comment):
            parent = parent_comment
        else:
            parent = db.session.get(Comment, parent_comment)
        if parent is None:
            raise UnknownParent()
        if parent.post_id != post.id:
            current_app.logger.error(
                "User %s tried to attach a reply on post %s to comment %s of post %s",
                author.id,
                post.id,
                parent.id,
                parent.post_id,
            )
            raise CrossPostReply()
        if parent.is_removed:
            raise TargetRemoved("Cannot reply to a removed comment.")
        _check_ancestry(post, parent)

    with transaction() as session:
        comment = Comment(
            post_id=post.id,
            user_id=author.id,
            parent_id=parent.id if parent is not None else None,
            body=body,
            score=0,
        )
        session.add(comment)

    current_app.logger.info(
        "Comment %s created on post %s by user %s", comment.id, post.id, author.id
    )
    return comment


def edit_comment(user: User, comment: Comment, body: str) -> Comment:
    _require_editor(user, comment)
    body = _clean_body(body, "Comment")
    with transaction():
        comment.body = body
    return comment


def get_thread(post: Post, viewer: User | None = None) -> Thread:
    """Assemble the post's comments into reply trees.

    Siblings are ordered by score, then age. Removed comments stay in the
    tree so their replies remain reachable.
    """

    if post.is_removed and not can_moderate(viewer):
        raise NotFound("Post not found.")

    comments = (
        Comment.query.filter_by(post_id=post.id)
        .order_by(Comment.score.desc(), Comment.created_at.asc(), Comment.id.asc())
        .all()
    )
    nodes = {comment.id: CommentNode(comment) for comment in comments}
    roots: list[CommentNode] = []
    for comment in comments:
        node = nodes[comment.id]
        if comment.parent_id is None:
            roots.append(node)
            continue
        parent = nodes.get(comment.parent_id)
        if parent is None:
            current_app.logger.error(
                "Comment %s on post %s has parent %s outside the thread",
                comment.id,
                post.id,
                comment.parent_id,
            )
            raise CommentCycle()
        parent.replies.append(node)

    # Anything not reachable from a root sits on a parent cycle.
    reachable = 0
    stack = list(roots)
    while stack:
        node = stack.pop()
        reachable += 1
        stack.extend(node.replies)
    if reachable != len(comments):
        current_app.logger.error(
            "Comment thread for post %s contains a parent cycle", post.id
        )
        raise CommentCycle()

    return Thread(post=post, comments=roots)


# ==================== Visibility ====================


def get_target(target_type: TargetType | str, target_id: int) -> Content:
    """Resolve a vote or report target."""

    try:
        target_type = TargetType(target_type)
    except ValueError:
        raise ValidationError("Target must be a post or a comment.") from None
    if target_type is TargetType.POST:
        return fetch(Post, target_id, NotFound, "Post not found.")
    return fetch(Comment, target_id, NotFound, "Comment not found.")


def target_type_of(target: Content) -> TargetType:
    return TargetType.POST if isinstance(target, Post) else TargetType.COMMENT


def apply_removal(actor: User, target: Content) -> None:
    """Hide ``target`` inside the caller's transaction."""

    lock(target)
    if target.is_removed:
        raise AlreadyRemoved()
    target.is_removed = True
    kind = target_type_of(target).value
    verb = "remove" if can_moderate(actor) else "delete"
    record_action(actor, f"{verb}_{kind}", kind, target.id)


def _remove(actor: User, target: Content) -> None:
    require(actor, Action.REMOVE_OWN)
    if not can_moderate(actor) and target.user_id != actor.id:
        raise PermissionDenied("Moderator access required.")

    with transaction():
        apply_removal(actor, target)

    current_app.logger.info(
        "%s %s removed by user %s",
        target_type_of(target).value.capitalize(),
        target.id,
        actor.id,
    )


def remove_post(actor: User, post: Post) -> None:
    """Hide a post from listings. Scores and comments are kept."""

    _remove(actor, post)


def remove_comment(actor: User, comment: Comment) -> None:
    _remove(actor, comment)


def _restore(moderator: User, target: Content) -> None:
    require(moderator, Action.MODERATE)
    with transaction():
        lock(target)
        if not target.is_removed:
            raise NotRemoved()
        target.is_removed = False
        kind = target_type_of(target).value
        record_action(moderator, f"restore_{kind}", kind, target.id)


def restore_post(moderator: User, post: Post) -> None:
    _restore(moderator, post)


def restore_comment(moderator: User, comment: Comment) -> None:
    _restore(moderator, comment)
