"""Resolve the authenticated user from the request's JWT."""

from __future__ import annotations

from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request
from werkzeug.exceptions import Unauthorized

from models import db
from models.user import User


def get_current_user(optional: bool = False) -> User | None:
    verify_jwt_in_request(optional=optional)

    identity = get_jwt_identity()
    if identity is None:
        return None
    try:
        user_id = int(identity)
    except (TypeError, ValueError):
        return None
    return db.session.get(User, user_id)


def require_user() -> User:
    user = get_current_user()
    if user is None:
        raise Unauthorized("User not found.")
    return user
