"""Authorization policy.

Every role check in the API goes through this module. The predicates are
pure: they look only at the caller and the ownership ids handed to them.
``require`` turns a DENY into a ForbiddenError.
"""
from dataclasses import dataclass
from typing import Iterable, Optional

from app.errors import ForbiddenError
from app.models.user import User, UserRole

ADMIN_ONLY = frozenset({UserRole.administrator})
ORGANIZER_OR_ADMIN = frozenset({UserRole.organizer, UserRole.administrator})
ANY_ROLE = frozenset(UserRole)


@dataclass(frozen=True)
class Actor:
    """The authenticated caller."""

    id: int
    role: UserRole

    @classmethod
    def from_user(cls, user: User) -> "Actor":
        return cls(id=user.id, role=UserRole(user.role))

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.administrator


def can_read_own(actor: Actor, owner_id: Optional[int]) -> bool:
    """The caller owns the resource, whatever their role."""
    return owner_id is not None and actor.id == owner_id


def can_manage_any(actor: Actor) -> bool:
    return actor.is_admin


def can_manage_own(actor: Actor, organizer_id: Optional[int]) -> bool:
    """Administrators always pass; organizers pass for events they own."""
    if can_manage_any(actor):
        return True
    return actor.role == UserRole.organizer and organizer_id is not None and actor.id == organizer_id


def passes_role_gate(actor: Actor, allowed_roles: Iterable[UserRole]) -> bool:
    return actor.role in allowed_roles


def require(decision: bool, message: str = "Access denied") -> None:
    if not decision:
        raise ForbiddenError(message)
