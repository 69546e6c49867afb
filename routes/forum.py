"""Forum blueprint: categories, posts, comments, votes and reports."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import jwt_required
from werkzeug.exceptions import BadRequest

from models.vote import TargetType
from services import content, moderation, stores, voting
from services.permissions import can_moderate
from utils.current_user import get_current_user, require_user
from utils.request_validation import parse_int, parse_json_request

forum_bp = Blueprint("forum", __name__)


def _page_args() -> tuple[int, int]:
    page_size = current_app.config.get("POSTS_PAGE_SIZE", 25)
    page = parse_int(request.args.get("page", 1), "page")
    if page < 1:
        raise BadRequest("page must be at least 1.")
    return page_size, (page - 1) * page_size


def _list_posts(category=None):
    sort = request.args.get("sort", "new")
    limit, offset = _page_args()
    posts = content.list_posts(category=category, sort=sort, limit=limit, offset=offset)
    results = [post.to_dict() for post in posts]
    return jsonify({"results": results, "count": len(results), "sort": sort})


def _vote_value(payload: dict) -> int:
    if "value" not in payload:
        raise BadRequest("value is required.")
    return parse_int(payload.get("value"), "value")


# ==================== Categories ====================


@forum_bp.route("/categories", methods=["GET"])
def list_categories():
    return jsonify([category.to_dict() for category in content.list_categories()])


@forum_bp.route("/categories", methods=["POST"])
@jwt_required()
def create_category():
    """Create a category. Admins only."""

    user = require_user()
    data = parse_json_request(request, required_keys=("name", "slug"))
    category = content.create_category(
        user,
        data.get("name"),
        data.get("slug"),
        data.get("description") or "",
        parse_int(data.get("sort_order", 0), "sort_order"),
    )
    return jsonify(category.to_dict()), HTTPStatus.CREATED


@forum_bp.route("/categories/<slug>/posts", methods=["GET"])
def category_posts(slug: str):
    category = content.get_category(slug)
    return _list_posts(category)


# ==================== Search ====================


@forum_bp.route("/search", methods=["GET"])
def search():
    """Match visible post titles and bodies, and store names."""

    term = (request.args.get("q") or "").strip()
    limit = current_app.config.get("POSTS_PAGE_SIZE", 25)
    posts = content.search_posts(term, limit=limit)
    found_stores = stores.search_stores(term, limit=limit)
    return jsonify(
        {
            "query": term,
            "posts": [post.to_dict() for post in posts],
            "stores": [store.to_dict() for store in found_stores],
        }
    )


# ==================== Posts ====================


@forum_bp.route("/posts", methods=["GET"])
def list_posts():
    """Return visible posts, optionally filtered by category slug."""

    return _list_posts(request.args.get("category") or None)


@forum_bp.route("/post/new", methods=["POST"])
@jwt_required()
def create_post():
    user = require_user()
    data = parse_json_request(request, required_keys=("category_id",))
    post = content.create_post(
        user,
        parse_int(data.get("category_id"), "category_id"),
        data.get("title"),
        data.get("body"),
    )
    return jsonify(post.to_dict()), HTTPStatus.CREATED


@forum_bp.route("/post/<int:post_id>", methods=["GET"])
@jwt_required(optional=True)
def view_post(post_id: int):
    """Return a post with its comment tree and the caller's votes."""

    viewer = get_current_user(optional=True)
    post = content.get_post(post_id, viewer)
    thread = content.get_thread(post, viewer)

    payload = thread.to_dict(redact_removed=not can_moderate(viewer))
    if viewer is not None:
        payload["user_vote"] = voting.vote_of(viewer, post)
    return jsonify(payload)


@forum_bp.route("/post/<int:post_id>/edit", methods=["POST"])
@jwt_required()
def edit_post(post_id: int):
    user = require_user()
    post = content.get_post(post_id, user)
    data = parse_json_request(request)
    post = content.edit_post(
        user, post, data.get("title", post.title), data.get("body", post.body)
    )
    return jsonify(post.to_dict())


@forum_bp.route("/post/<int:post_id>/delete", methods=["POST"])
@jwt_required()
def delete_post(post_id: int):
    """Let an author (or moderator) take a post down."""

    user = require_user()
    post = content.get_post(post_id, user)
    content.remove_post(user, post)
    return jsonify({"id": post.id, "is_removed": True})


@forum_bp.route("/post/<int:post_id>/comment", methods=["POST"])
@jwt_required()
def add_comment(post_id: int):
    user = require_user()
    post = content.get_post(post_id, user)
    data = parse_json_request(request, required_keys=("body",))

    parent_id = data.get("parent_id")
    if parent_id is not None:
        parent_id = parse_int(parent_id, "parent_id")

    comment = content.create_comment(user, post, parent_id, data.get("body"))
    return jsonify(comment.to_dict()), HTTPStatus.CREATED


@forum_bp.route("/post/<int:post_id>/vote", methods=["POST"])
@jwt_required()
def vote_post(post_id: int):
    user = require_user()
    post = content.get_target(TargetType.POST, post_id)
    value = _vote_value(parse_json_request(request))
    score = voting.cast_vote(user, post, value)
    return jsonify({"id": post_id, "score": score, "vote": voting.vote_of(user, post)})


@forum_bp.route("/post/<int:post_id>/report", methods=["POST"])
@jwt_required()
def report_post(post_id: int):
    user = require_user()
    post = content.get_target(TargetType.POST, post_id)
    data = parse_json_request(request)
    entry = moderation.report(user, post, data.get("reason"))
    return jsonify(entry.to_dict()), HTTPStatus.CREATED


# ==================== Comments ====================


@forum_bp.route("/comment/<int:comment_id>/vote", methods=["POST"])
@jwt_required()
def vote_comment(comment_id: int):
    user = require_user()
    comment = content.get_comment(comment_id)
    value = _vote_value(parse_json_request(request))
    score = voting.cast_vote(user, comment, value)
    return jsonify(
        {"id": comment_id, "score": score, "vote": voting.vote_of(user, comment)}
    )


@forum_bp.route("/comment/<int:comment_id>/edit", methods=["POST"])
@jwt_required()
def edit_comment(comment_id: int):
    user = require_user()
    comment = content.get_comment(comment_id)
    data = parse_json_request(request, required_keys=("body",))
    comment = content.edit_comment(user, comment, data.get("body"))
    return jsonify(comment.to_dict())


@forum_bp.route("/comment/<int:comment_id>/delete", methods=["POST"])
@jwt_required()
def delete_comment(comment_id: int):
    user = require_user()
    comment = content.get_comment(comment_id)
    content.remove_comment(user, comment)
    return jsonify({"id": comment.id, "is_removed": True})


@forum_bp.route("/comment/<int:comment_id>/report", methods=["POST"])
@jwt_required()
def report_comment(comment_id: int):
    user = require_user()
    comment = content.get_comment(comment_id)
    data = parse_json_request(request)
    entry = moderation.report(user, comment, data.get("reason"))
    return jsonify(entry.to_dict()), HTTPStatus.CREATED
