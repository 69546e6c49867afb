"""Verification blueprint for mechanic credential review, plus admin tools."""

from __future__ import annotations

from flask import Blueprint, jsonify, request
from flask.typing import ResponseReturnValue
from flask_jwt_extended import jwt_required

from models.verification_request import VerificationRequest
from services import fetch, identity, moderation
from services.errors import NotFound
from services.identity import Decision
from utils.current_user import require_user
from utils.request_validation import parse_int, parse_json_request

verify_bp = Blueprint("verify", __name__)
admin_bp = Blueprint("admin", __name__)


def _get_request_or_404(request_id: int) -> VerificationRequest:
    return fetch(
        VerificationRequest, request_id, NotFound, "Verification request not found."
    )


@verify_bp.route("/verification", methods=["GET"])
@jwt_required()
def verification_status():
    """Return the caller's role and latest verification request."""

    user = require_user()
    latest = identity.latest_verification(user)

    return jsonify(
        {
            "role": user.role.value,
            "latest_request": latest.to_dict() if latest else None,
        }
    )


@verify_bp.route("/verification", methods=["POST"])
@jwt_required()
def submit_verification():
    """Submit credentials for review and create a pending request."""

    user = require_user()
    data = parse_json_request(request, required_keys=("credentials",))

    verification = identity.submit_verification(
        user,
        data.get("credentials"),
        data.get("proof_type") or "general",
    )

    return jsonify(verification.to_dict()), 201


@admin_bp.route("/verify/pending", methods=["GET"])
@jwt_required()
def list_pending_requests() -> ResponseReturnValue:
    """Return pending verification requests for admin review."""

    admin = require_user()
    pending = identity.pending_verifications(admin)
    return jsonify([item.to_dict() for item in pending])


def _resolve(request_id: int, decision: Decision):
    admin = require_user()
    verification = _get_request_or_404(request_id)

    data = parse_json_request(request, allow_empty=True)
    note = data.get("review_note") or data.get("note")

    verification = identity.resolve_verification(admin, verification, decision, note)

    return jsonify(
        {
            "id": verification.id,
            "status": verification.status.value,
            "role": verification.user.role.value,
            "review_note": verification.review_note,
        }
    )


@admin_bp.route("/verify/<int:request_id>/approve", methods=["POST"])
@jwt_required()
def approve_request(request_id: int):
    """Approve a request and promote the member to verified mechanic."""

    return _resolve(request_id, Decision.APPROVE)


@admin_bp.route("/verify/<int:request_id>/deny", methods=["POST"])
@jwt_required()
def deny_request(request_id: int):
    """Deny a request, capturing an optional review note."""

    return _resolve(request_id, Decision.DENY)


@admin_bp.route("/user/<int:user_id>/role", methods=["POST"])
@jwt_required()
def update_user_role(user_id: int):
    admin = require_user()
    target = identity.get_user(user_id)
    data = parse_json_request(request, required_keys=("role",))
    user = identity.change_role(admin, target, data.get("role"))
    return jsonify(user.to_dict())


@admin_bp.route("/activity", methods=["GET"])
@jwt_required()
def activity_log():
    admin = require_user()
    limit = parse_int(request.args.get("limit", 100), "limit")
    entries = moderation.moderation_log(admin, max(1, min(limit, 500)))
    return jsonify([entry.to_dict() for entry in entries])
