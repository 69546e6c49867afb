"""Moderation blueprint: report queue, removals and bans."""

from __future__ import annotations

from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required

from services import content, identity, moderation
from utils.current_user import require_user
from utils.request_validation import parse_json_request

mod_bp = Blueprint("moderation", __name__)


@mod_bp.route("", methods=["GET"])
@jwt_required()
def mod_queue():
    """Return open reports (oldest first) and the banned-user list."""

    user = require_user()
    reports = moderation.mod_queue(user)
    banned = moderation.banned_users(user)
    return jsonify(
        {
            "reports": [entry.to_dict() for entry in reports],
            "banned_users": [member.to_dict() for member in banned],
        }
    )


@mod_bp.route("/post/<int:post_id>/remove", methods=["POST"])
@jwt_required()
def remove_post(post_id: int):
    user = require_user()
    post = content.get_post(post_id, user)
    content.remove_post(user, post)
    return jsonify({"id": post.id, "is_removed": post.is_removed, "score": post.score})


@mod_bp.route("/post/<int:post_id>/restore", methods=["POST"])
@jwt_required()
def restore_post(post_id: int):
    user = require_user()
    post = content.get_post(post_id, user)
    content.restore_post(user, post)
    return jsonify({"id": post.id, "is_removed": post.is_removed, "score": post.score})


@mod_bp.route("/comment/<int:comment_id>/remove", methods=["POST"])
@jwt_required()
def remove_comment(comment_id: int):
    user = require_user()
    comment = content.get_comment(comment_id)
    content.remove_comment(user, comment)
    return jsonify({"id": comment.id, "is_removed": comment.is_removed})


@mod_bp.route("/comment/<int:comment_id>/restore", methods=["POST"])
@jwt_required()
def restore_comment(comment_id: int):
    user = require_user()
    comment = content.get_comment(comment_id)
    content.restore_comment(user, comment)
    return jsonify({"id": comment.id, "is_removed": comment.is_removed})


@mod_bp.route("/user/<int:user_id>/ban", methods=["POST"])
@jwt_required()
def ban_user(user_id: int):
    moderator = require_user()
    target = identity.get_user(user_id)
    data = parse_json_request(request, allow_empty=True)
    user = moderation.ban(moderator, target, data.get("reason"))
    return jsonify(user.to_dict())


@mod_bp.route("/user/<int:user_id>/unban", methods=["POST"])
@jwt_required()
def unban_user(user_id: int):
    moderator = require_user()
    target = identity.get_user(user_id)
    user = moderation.unban(moderator, target)
    return jsonify(user.to_dict())


@mod_bp.route("/report/<int:report_id>/resolve", methods=["POST"])
@jwt_required()
def resolve_report(report_id: int):
    """Dismiss a report or remove its target, in one transaction."""

    moderator = require_user()
    entry = moderation.get_report(report_id)
    data = parse_json_request(request, required_keys=("action",))
    entry = moderation.resolve_report(moderator, entry, data.get("action"))
    return jsonify(entry.to_dict())
