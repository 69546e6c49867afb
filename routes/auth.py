"""Authentication blueprint providing register, login and profile endpoints."""

from __future__ import annotations
from http import HTTPStatus

from flask import Blueprint, jsonify, request
from flask_jwt_extended import create_access_token, jwt_required

from services import identity
from services.permissions import Action, check_permission
from utils.current_user import require_user
from utils.request_validation import parse_json_request

auth_bp = Blueprint("auth", __name__)


@auth_bp.route("/register", methods=["POST"])
def register() -> tuple:
    """Register a new member with an email, username and password."""
    payload = parse_json_request(request, required_keys=("email", "username", "password"))

    user = identity.register(
        payload.get("email"),
        payload.get("username"),
        payload.get("password"),
    )

    return (
        jsonify(
            {
                "message": "User registered successfully.",
                "user": user.to_dict(include_email=True),
            }
        ),
        HTTPStatus.CREATED,
    )


@auth_bp.route("/login", methods=["POST"])
def login() -> tuple:
    """Authenticate a member and return a JWT access token."""
    payload = parse_json_request(request, required_keys=("email", "password"))

    user = identity.authenticate(payload.get("email"), payload.get("password"))

    token = create_access_token(identity=str(user.id))
    return (
        jsonify(
            {
                "access_token": token,
                "user": user.to_dict(include_email=True),
            }
        ),
        HTTPStatus.OK,
    )


@auth_bp.route("/me", methods=["GET"])
@jwt_required()
def me() -> tuple:
    """Return the caller's profile and capabilities, including while banned."""
    user = require_user()
    return (
        jsonify(
            {
                "user": user.to_dict(include_email=True),
                "capabilities": sorted(
                    action.value for action in Action if check_permission(user, action)
                ),
            }
        ),
        HTTPStatus.OK,
    )
