"""Registration, authentication and the verification workflow."""

from __future__ import annotations

import enum
import re

from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from models import utcnow
from models.user import Role, User
from models.verification_request import VerificationRequest, VerificationStatus

from . import fetch, lock, record_action, transaction
from .errors import (
    AlreadyResolved,
    AlreadyVerified,
    Conflict,
    DuplicateEmail,
    DuplicateUsername,
    InvalidCredentials,
    NotFound,
    PendingRequestExists,
    PermissionDenied,
    ValidationError,
    WeakCredential,
)
from .permissions import Action, require

EMAIL_MAX_LENGTH = 254
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
USERNAME_PATTERN = re.compile(r"^\w{3,20}$")


class Decision(str, enum.Enum):
    APPROVE = "approve"
    DENY = "deny"


def normalize_email(raw_email: str | None) -> str:
    """Normalize an email string by stripping whitespace and lowering case."""
    return (raw_email or "").strip().lower()


def _validate_registration(email: str, username: str, password: str) -> None:
    errors = []
    if len(email) > EMAIL_MAX_LENGTH or not EMAIL_PATTERN.match(email):
        errors.append("Invalid email address")
    if not USERNAME_PATTERN.match(username):
        errors.append(
            "Username must be 3-20 characters, alphanumeric and underscores only"
        )
    if errors:
        raise ValidationError("; ".join(errors) + ".")

    min_length = current_app.config.get("PASSWORD_MIN_LENGTH", 8)
    if len(password) < min_length:
        raise WeakCredential(f"Password must be at least {min_length} characters.")


def _account_conflict(email: str, username: str) -> Conflict | None:
    if User.query.filter(func.lower(User.email) == email).first() is not None:
        return DuplicateEmail()
    if (
        User.query.filter(func.lower(User.username) == username.lower()).first()
        is not None
    ):
        return DuplicateUsername()
    return None


def register(email: str, username: str, password: str) -> User:
    """Create an unverified account."""

    email = normalize_email(email)
    username = (username or "").strip()
    password = password or ""
    _validate_registration(email, username, password)

    try:
        with transaction() as session:
            conflict = _account_conflict(email, username)
            if conflict is not None:
                raise conflict

            user = User(email=email, username=username, role=Role.UNVERIFIED)
            user.set_password(password)
            session.add(user)
    except IntegrityError:
        # Lost a race with a concurrent registration.
        raise _account_conflict(email, username) or DuplicateEmail() from None

    current_app.logger.info("Registered user %s (id=%s)", user.username, user.id)
    return user


def authenticate(email: str, password: str) -> User:
    """Return the user owning these credentials.

    Banned users still authenticate; every mutating operation rejects them
    at the permission check instead.
    """

    user = User.query.filter(func.lower(User.email) == normalize_email(email)).first()
    if user is None or not user.check_password(password or ""):
        raise InvalidCredentials()
    return user


def submit_verification(
    user: User, credentials_text: str, proof_type: str = "general"
) -> VerificationRequest:
    """Open a verification request for an unverified member."""

    if user.role is not Role.UNVERIFIED:
        raise AlreadyVerified()
    require(user, Action.SUBMIT_VERIFICATION)

    credentials_text = (credentials_text or "").strip()
    if not credentials_text:
        raise ValidationError("Please provide verification details.")
    min_detail = current_app.config.get("VERIFICATION_MIN_DETAIL", 50)
    if len(credentials_text) < min_detail:
        raise ValidationError(
            f"Please provide more detail (at least {min_detail} characters)."
        )

    with transaction() as session:
        # One pending request per member; concurrent submits queue on the row.
        lock(user)
        pending = VerificationRequest.query.filter_by(
            user_id=user.id, status=VerificationStatus.PENDING
        ).first()
        if pending is not None:
            raise PendingRequestExists()

        request = VerificationRequest(
            user_id=user.id,
            proof_type=(proof_type or "general").strip() or "general",
            credentials=credentials_text,
        )
        session.add(request)

    current_app.logger.info(
        "Verification request %s submitted by user %s", request.id, user.id
    )
    return request


def latest_verification(user: User) -> VerificationRequest | None:
    return (
        VerificationRequest.query.filter_by(user_id=user.id)
        .order_by(VerificationRequest.created_at.desc(), VerificationRequest.id.desc())
        .first()
    )


def pending_verifications(admin: User) -> list[VerificationRequest]:
    """Return pending requests, oldest first."""

    require(admin, Action.ADMINISTER)
    return (
        VerificationRequest.query.filter_by(status=VerificationStatus.PENDING)
        .order_by(VerificationRequest.created_at.asc(), VerificationRequest.id.asc())
        .all()
    )


def resolve_verification(
    admin: User,
    request: VerificationRequest,
    decision: Decision | str,
    note: str | None = None,
) -> VerificationRequest:
    """Approve or deny a pending request. Resolution is final."""

    require(admin, Action.ADMINISTER)
    try:
        decision = Decision(decision)
    except ValueError:
        raise ValidationError("Decision must be 'approve' or 'deny'.") from None

    with transaction():
        lock(request)
        if request.is_resolved:
            raise AlreadyResolved("This verification request was already resolved.")

        request.reviewer_id = admin.id
        request.review_note = note
        request.reviewed_at = utcnow()
        if decision is Decision.APPROVE:
            request.status = VerificationStatus.APPROVED
            requester = request.user
            lock(requester)
            if requester.role is Role.UNVERIFIED:
                requester.role = Role.VERIFIED_MECHANIC
        else:
            request.status = VerificationStatus.DENIED

        record_action(
            admin,
            f"{decision.value}_verification",
            "verification",
            request.id,
            note,
        )

    current_app.logger.info(
        "Verification request %s %s by admin %s",
        request.id,
        request.status.value,
        admin.id,
    )
    return request


def change_role(admin: User, user: User, role: Role | str) -> User:
    """Set another member's role."""

    require(admin, Action.ADMINISTER)
    if user.id == admin.id:
        raise PermissionDenied("You cannot change your own role.")
    try:
        role = Role(role)
    except ValueError:
        allowed = ", ".join(r.value for r in Role)
        raise ValidationError(f"Role must be one of: {allowed}.") from None

    with transaction():
        lock(user)
        user.role = role
        record_action(admin, "change_role", "user", user.id, role.value)

    current_app.logger.info("User %s role set to %s by admin %s", user.id, role.value, admin.id)
    return user


def get_user(user_id: int) -> User:
    return fetch(User, user_id, NotFound, "User not found.")
