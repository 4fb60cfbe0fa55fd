"""Maps a session's role to the dashboard that serves it."""
from dataclasses import dataclass
from typing import Callable, Optional, Union

from medibot.core.config import settings
from medibot.core.constants import UserRole
from medibot.utils.errors import UnknownRoleError

UNKNOWN_ROLE_POLICIES = ("reject", "patient")


@dataclass(frozen=True)
class UnknownRole:
    raw: str


def resolve_role(raw: Optional[str]) -> Union[UserRole, UnknownRole]:
    """Absent role means a fresh sign-up, which defaults to patient."""
    if raw is None or not str(raw).strip():
        return UserRole.PATIENT
    try:
        return UserRole(str(raw).strip())
    except ValueError:
        return UnknownRole(str(raw))


def effective_role(raw: Optional[str], policy: Optional[str] = None) -> UserRole:
    policy = policy or settings.UNKNOWN_ROLE_POLICY
    if policy not in UNKNOWN_ROLE_POLICIES:
        raise ValueError(f"Unknown role policy: {policy}")

    role = resolve_role(raw)
    if isinstance(role, UnknownRole):
        if policy == "patient":
            return UserRole.PATIENT
        raise UnknownRoleError(role.raw)
    return role


def dispatch(raw: Optional[str], builders: dict[UserRole, Callable], policy: Optional[str] = None):
    """Return the (role, builder) pair for ``raw``.

    ``builders`` must cover every role; a missing entry is a programming
    error rather than a user-facing condition.
    """
    role = effective_role(raw, policy)
    missing = set(UserRole) - set(builders)
    if missing:
        raise LookupError(f"No dashboard for roles: {sorted(r.value for r in missing)}")
    return role, builders[role]
