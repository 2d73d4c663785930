"""User administration.

Administrators manage every account, but never their own role or their
own deletion: an instance must not be able to lock itself out of its last
administrator by accident.
"""
import logging
from typing import Any, Optional

from app.errors import ConflictError, InvalidInputError, NotFoundError
from app.models.user import User, UserRole
from app.security import hash_password
from app.services.authorization import (
    ADMIN_ONLY,
    Actor,
    can_manage_any,
    can_read_own,
    passes_role_gate,
    require,
)
from app.stores.interfaces import DuplicateError, UserStore

logger = logging.getLogger(__name__)

MIN_SEARCH_LENGTH = 2


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserService:

    def __init__(self, users: UserStore) -> None:
        self._users = users

    def _require_admin(self, actor: Actor) -> None:
        require(passes_role_gate(actor, ADMIN_ONLY), "Administrator access required")

    def _get(self, user_id: int) -> User:
        user = self._users.get(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def create_account(self, name: str, email: str, password: str, role: UserRole) -> User:
        """Insert a user after the duplicate-email check. No permission check."""
        email = normalize_email(email)
        if self._users.email_exists(email):
            raise ConflictError("Email already in use")
        try:
            user = self._users.create(name.strip(), email, hash_password(password), role)
        except DuplicateError:
            raise ConflictError("Email already in use")
        logger.info("Created %s account %s (%s)", role.value, user.id, email)
        return user

    def list_page(self, actor: Actor, page: int, limit: int) -> tuple[list[User], int]:
        self._require_admin(actor)
        return self._users.list_page(limit, (page - 1) * limit), self._users.count()

    def get(self, actor: Actor, user_id: int) -> User:
        require(
            can_read_own(actor, user_id) or can_manage_any(actor),
            "You are not allowed to view this user",
        )
        return self._get(user_id)

    def create(self, actor: Actor, name: str, email: str, password: str, role: UserRole) -> User:
        self._require_admin(actor)
        return self.create_account(name, email, password, role)

    def update(self, actor: Actor, user_id: int, fields: dict[str, Any]) -> User:
        self._require_admin(actor)
        user = self._get(user_id)

        changes: dict[str, Any] = {}
        if fields.get("name") is not None:
            changes["name"] = fields["name"].strip()
        if fields.get("email") is not None:
            email = normalize_email(fields["email"])
            if self._users.email_exists(email, exclude_id=user_id):
                raise ConflictError("Email already in use")
            changes["email"] = email
        if fields.get("role") is not None and UserRole(fields["role"]) != user.role:
            if user_id == actor.id:
                raise ConflictError("You cannot change your own role")
            changes["role"] = UserRole(fields["role"])
        if fields.get("password"):
            changes["password_hash"] = hash_password(fields["password"])

        if not changes:
            return user
        try:
            user = self._users.update(user, changes)
        except DuplicateError:
            raise ConflictError("Email already in use")
        logger.info("User %s updated by %s: %s", user_id, actor.id, sorted(changes))
        return user

    def delete(self, actor: Actor, user_id: int) -> None:
        self._require_admin(actor)
        if user_id == actor.id:
            raise ConflictError("You cannot delete your own account")
        user = self._get(user_id)
        self._users.delete(user)
        logger.info("User %s deleted by %s", user_id, actor.id)

    def change_role(self, actor: Actor, user_id: int, role: UserRole) -> User:
        self._require_admin(actor)
        if user_id == actor.id:
            raise ConflictError("You cannot change your own role")
        user = self._get(user_id)
        user = self._users.update(user, {"role": role})
        logger.info("User %s role set to %s by %s", user_id, role.value, actor.id)
        return user

    def list_by_role(self, actor: Actor, role: UserRole) -> list[User]:
        self._require_admin(actor)
        return self._users.list_by_role(role)

    def search(self, actor: Actor, term: Optional[str]) -> list[User]:
        self._require_admin(actor)
        term = (term or "").strip()
        if len(term) < MIN_SEARCH_LENGTH:
            raise InvalidInputError(f"Search term must have at least {MIN_SEARCH_LENGTH} characters")
        return self._users.search(term)

    def statistics(self, actor: Actor) -> dict[str, int]:
        self._require_admin(actor)
        stats = {"total": self._users.count()}
        for role in UserRole:
            stats[role.value] = self._users.count(role=role)
        return stats
