"""Role and ban based capability checks.

``check_permission`` is the only place that decides whether a role may
perform an action; services call it (usually through ``require``) before
touching the database.
"""

from __future__ import annotations

import enum

from models.user import Role, User

from .errors import NotAdmin, PermissionDenied


class Action(str, enum.Enum):
    CREATE_COMMENT = "create_comment"
    VOTE_CONTENT = "vote_content"
    REPORT = "report"
    EDIT_OWN = "edit_own"
    REMOVE_OWN = "remove_own"
    SUBMIT_VERIFICATION = "submit_verification"
    CREATE_POST = "create_post"
    SUBMIT_STORE = "submit_store"
    VOTE_STORE = "vote_store"
    MODERATE = "moderate"
    ADMINISTER = "administer"


_MEMBER_ACTIONS = frozenset(
    {
        Action.CREATE_COMMENT,
        Action.VOTE_CONTENT,
        Action.REPORT,
        Action.EDIT_OWN,
        Action.REMOVE_OWN,
    }
)
_VERIFIED_ACTIONS = _MEMBER_ACTIONS | {
    Action.CREATE_POST,
    Action.SUBMIT_STORE,
    Action.VOTE_STORE,
}
_MODERATOR_ACTIONS = _VERIFIED_ACTIONS | {Action.MODERATE}

CAPABILITIES: dict[Role, frozenset[Action]] = {
    Role.UNVERIFIED: _MEMBER_ACTIONS | {Action.SUBMIT_VERIFICATION},
    Role.VERIFIED_MECHANIC: _VERIFIED_ACTIONS,
    Role.MODERATOR: _MODERATOR_ACTIONS,
    Role.ADMIN: _MODERATOR_ACTIONS | {Action.ADMINISTER},
}

_DENIAL_MESSAGES = {
    Action.CREATE_POST: "Only verified mechanics can create posts.",
    Action.SUBMIT_STORE: "Only verified mechanics can submit stores.",
    Action.VOTE_STORE: "Only verified mechanics can vote on stores.",
    Action.SUBMIT_VERIFICATION: "Only unverified members can request verification.",
    Action.MODERATE: "Moderator access required.",
}


def check_permission(user: User | None, action: Action) -> bool:
    """Return whether ``user`` may perform ``action``."""

    if user is None or user.is_banned:
        return False
    return action in CAPABILITIES.get(user.role, frozenset())


def require(user: User | None, action: Action) -> None:
    """Raise the matching ``PermissionDenied`` unless the action is allowed."""

    if check_permission(user, action):
        return
    if user is not None and user.is_banned:
        raise PermissionDenied("Your account is banned.")
    if action is Action.ADMINISTER:
        raise NotAdmin()
    raise PermissionDenied(_DENIAL_MESSAGES.get(action))


def can_moderate(user: User | None) -> bool:
    return check_permission(user, Action.MODERATE)
