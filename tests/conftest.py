"""Shared pytest fixtures for the application tests."""

from __future__ import annotations

import itertools
import sys
from pathlib import Path

import pytest
from flask import Flask
from flask.testing import FlaskClient
from flask_jwt_extended import create_access_token

ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from app import create_app  # noqa: E402
from config import Config  # noqa: E402
from models import db  # noqa: E402
from models.category import Category  # noqa: E402
from models.user import Role, User  # noqa: E402

PASSWORD = "password123"

_sequence = itertools.count(1)


class _BaseTestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JWT_SECRET_KEY = "test-secret-key-that-is-long-enough-for-hs256"
    RATE_LIMIT = "1000 per minute"


def new_user(role: Role = Role.UNVERIFIED, banned: bool = False) -> User:
    """Persist a member directly; requires an active app context."""

    n = next(_sequence)
    username = f"{role.value[:10]}_{n}"
    user = User(
        email=f"{username}@example.com",
        username=username,
        role=role,
        is_banned=banned,
    )
    user.set_password(PASSWORD)
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture()
def app() -> Flask:
    """Create a Flask application instance for tests."""

    application = create_app(_BaseTestConfig)

    with application.app_context():
        db.create_all()

    yield application

    with application.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app: Flask) -> FlaskClient:
    """Return a test client for the Flask app."""

    return app.test_client()


@pytest.fixture()
def app_ctx(app: Flask):
    """Run a service-level test inside an application context."""

    with app.app_context():
        yield app


@pytest.fixture()
def make_user(app_ctx):
    """Factory for members of a given role inside the test's app context."""

    return new_user


@pytest.fixture()
def category(app_ctx) -> Category:
    category = Category(name="Engine & Drivetrain", slug="engine", sort_order=0)
    db.session.add(category)
    db.session.commit()
    return category


@pytest.fixture()
def member(app: Flask):
    """Factory returning ``(user_id, auth_headers)`` for HTTP tests."""

    def _member(role: Role = Role.UNVERIFIED, banned: bool = False):
        with app.app_context():
            user = new_user(role, banned)
            token = create_access_token(identity=str(user.id))
            return user.id, {"Authorization": f"Bearer {token}"}

    return _member


@pytest.fixture()
def category_id(app: Flask) -> int:
    with app.app_context():
        category = Category(name="Electrical", slug="electrical", sort_order=1)
        db.session.add(category)
        db.session.commit()
        return category.id
