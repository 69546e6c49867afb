"""Tests for the forum model helpers."""

from models import db
from models.store import Store, StoreVote
from models.user import Role, User


def test_user_password_and_serialization(app):
    """Passwords are hashed and emails stay out of public payloads."""

    with app.app_context():
        user = User(email="helper@example.com", username="helper")
        user.set_password("password123")
        db.session.add(user)
        db.session.commit()

        assert user.password_hash != "password123"
        assert user.check_password("password123") is True
        assert user.check_password("wrong") is False
        assert user.role is Role.UNVERIFIED
        assert user.is_banned is False

        public = user.to_dict()
        assert "email" not in public
        assert public["role"] == "unverified"
        assert user.to_dict(include_email=True)["email"] == "helper@example.com"


def test_store_reliability_helpers(app):
    """Reliability is the share of positive votes, absent without votes."""

    with app.app_context():
        owner = User(email="owner@example.com", username="owner")
        owner.set_password("password123")
        db.session.add(owner)
        db.session.commit()

        store = Store(name="Parts Barn", url="https://parts.example", category="General", submitted_by=owner.id)
        db.session.add(store)
        db.session.commit()

        assert store.reliability_score() is None
        assert store.to_dict()["reliability"] == "no ratings"

        voters = []
        for index in range(3):
            voter = User(email=f"v{index}@example.com", username=f"voter{index}")
            voter.set_password("password123")
            voters.append(voter)
        db.session.add_all(voters)
        db.session.commit()

        db.session.add_all(
            [
                StoreVote(store_id=store.id, user_id=voters[0].id, positive=True),
                StoreVote(store_id=store.id, user_id=voters[1].id, positive=True),
                StoreVote(store_id=store.id, user_id=voters[2].id, positive=False),
            ]
        )
        db.session.commit()

        assert store.vote_counts() == (2, 3)
        assert abs(store.reliability_score() - 2 / 3) < 1e-9
        assert store.to_dict()["reliability"] == "67%"
