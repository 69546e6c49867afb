"""Member profiles and their posting history."""

from __future__ import annotations

from flask import Blueprint, jsonify
from flask_jwt_extended import jwt_required

from services import content, identity
from utils.current_user import get_current_user

profile_bp = Blueprint("profile", __name__)


@profile_bp.route("/user/<int:user_id>", methods=["GET"])
@jwt_required(optional=True)
def view_profile(user_id: int):
    viewer = get_current_user(optional=True)
    user = identity.get_user(user_id)
    payload = user.to_dict(include_email=viewer is not None and viewer.id == user.id)
    payload["post_count"] = len(content.posts_by_user(user, viewer))
    payload["comment_count"] = len(content.comments_by_user(user, viewer))
    return jsonify({"user": payload})


@profile_bp.route("/user/<int:user_id>/posts", methods=["GET"])
@jwt_required(optional=True)
def user_posts(user_id: int):
    """A member's posts. Removed ones are listed for the member and moderators."""

    viewer = get_current_user(optional=True)
    user = identity.get_user(user_id)
    results = [post.to_dict() for post in content.posts_by_user(user, viewer)]
    return jsonify({"results": results, "count": len(results)})


@profile_bp.route("/user/<int:user_id>/comments", methods=["GET"])
@jwt_required(optional=True)
def user_comments(user_id: int):
    viewer = get_current_user(optional=True)
    user = identity.get_user(user_id)
    redact = not content.sees_removed_history(user, viewer)
    results = [
        comment.to_dict(redact_removed=redact)
        for comment in content.comments_by_user(user, viewer)
    ]
    return jsonify({"results": results, "count": len(results)})
