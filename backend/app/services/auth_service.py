"""Sign-up, sign-in and the caller's own profile."""
import logging
from typing import Optional

from app.errors import ConflictError, InvalidInputError, NotFoundError, UnauthenticatedError
from app.models.user import User, UserRole
from app.security import create_access_token, hash_password, verify_password
from app.services.audit_recorder import NO_EVENT, AuditRecorder
from app.services.authorization import Actor
from app.services.user_service import UserService, normalize_email
from app.stores.interfaces import DuplicateError, UserStore

logger = logging.getLogger(__name__)

SELF_SERVICE_ROLES = (UserRole.participant, UserRole.organizer)


class AuthService:

    def __init__(self, users: UserStore, recorder: AuditRecorder) -> None:
        self._users = users
        self._accounts = UserService(users)
        self._recorder = recorder

    def _current(self, actor: Actor) -> User:
        user = self._users.get(actor.id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def register(
        self, name: str, email: str, password: str, role: UserRole = UserRole.participant
    ) -> tuple[User, str]:
        if role not in SELF_SERVICE_ROLES:
            raise InvalidInputError("Administrator accounts cannot be self-registered")
        user = self._accounts.create_account(name, email, password, role)
        return user, create_access_token(user.id)

    def login(
        self, email: str, password: str, ip: Optional[str] = None, device: Optional[str] = None
    ) -> tuple[User, str]:
        user = self._users.get_by_email(normalize_email(email))
        if not user or not verify_password(password, user.password_hash):
            logger.info("Failed login for %s", email)
            raise UnauthenticatedError("Invalid email or password")

        token = create_access_token(user.id)
        logger.info("User %s logged in", user.id)
        self._recorder.record_registration(user.id, NO_EVENT, ip, device)
        return user, token

    def logout(self, actor: Actor, ip: Optional[str] = None, device: Optional[str] = None) -> None:
        # tokens are stateless; logout only leaves a trace in the access log
        logger.info("User %s logged out", actor.id)
        self._recorder.record_registration(actor.id, NO_EVENT, ip, device)

    def refresh(self, actor: Actor) -> str:
        return create_access_token(actor.id)

    def profile(self, actor: Actor) -> User:
        return self._current(actor)

    def update_profile(self, actor: Actor, name: Optional[str] = None, email: Optional[str] = None) -> User:
        """Change the caller's name or email. The role is not editable here."""
        user = self._current(actor)
        changes = {}
        if name is not None:
            changes["name"] = name.strip()
        if email is not None:
            email = normalize_email(email)
            if self._users.email_exists(email, exclude_id=user.id):
                raise ConflictError("Email already in use")
            changes["email"] = email
        if not changes:
            return user
        try:
            user = self._users.update(user, changes)
        except DuplicateError:
            raise ConflictError("Email already in use")
        logger.info("User %s updated their profile", user.id)
        return user

    def change_password(self, actor: Actor, current_password: str, new_password: str) -> None:
        user = self._current(actor)
        if not verify_password(current_password, user.password_hash):
            raise InvalidInputError("Current password is incorrect")
        self._users.update(user, {"password_hash": hash_password(new_password)})
        logger.info("User %s changed their password", user.id)
