"""User model definition."""

import enum

from werkzeug.security import check_password_hash, generate_password_hash

from . import db, enum_values, utcnow


class Role(str, enum.Enum):
    """Forum roles, lowest privilege first."""

    UNVERIFIED = "unverified"
    VERIFIED_MECHANIC = "verified_mechanic"
    MODERATOR = "moderator"
    ADMIN = "admin"


class User(db.Model):
    """Represents a registered forum member."""

    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(254), unique=True, nullable=False, index=True)
    username = db.Column(db.String(20), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(
        db.Enum(Role, name="user_role", values_callable=enum_values),
        nullable=False,
        default=Role.UNVERIFIED,
        server_default=db.text("'unverified'"),
    )
    is_banned = db.Column(
        db.Boolean,
        nullable=False,
        default=False,
        server_default=db.text("false"),
    )
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def set_password(self, password: str) -> None:
        """Hash and store the password."""

        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        """Verify a password against the stored hash."""

        return check_password_hash(self.password_hash, password)

    def to_dict(self, include_email: bool = False) -> dict:
        data = {
            "id": self.id,
            "username": self.username,
            "role": self.role.value,
            "is_banned": self.is_banned,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
        if include_email:
            data["email"] = self.email
        return data

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"<User {self.username} role={self.role.value}>"
