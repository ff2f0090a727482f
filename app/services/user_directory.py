"""User lifecycle rules: creation, lookup, deletion, bans, roles and password checks."""

import logging
from datetime import UTC, datetime

from app.core.errors import ConflictError, ValidationError
from app.core.security import (
    PASSWORD_MAX_LEN,
    USER_ID_MAX,
    USER_ID_MIN,
    USERNAME_MAX_LEN,
    PasswordHasher,
)
from app.schemas.auth import AuthResult, LoginFailure
from app.schemas.user import KNOWN_ROLES, ROLE_USER, SafeUser, UserAccount
from app.services.user_repository import UserRepository

logger = logging.getLogger(__name__)

MSG_USER_NOT_FOUND = "User not found"
MSG_USER_BANNED = "user has been banned"
MSG_INVALID_PASSWORD = "invalid password"


def _require_text(value: object, field: str, max_len: int) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} must be a non-empty string")
    if len(value) > max_len:
        raise ValidationError(f"{field} must be at most {max_len} characters")
    return value


def _require_id(user_id: object) -> int:
    # bool is an int subclass; True must not address user 1
    if not isinstance(user_id, int) or isinstance(user_id, bool):
        raise ValidationError("id must be an integer")
    if not USER_ID_MIN <= user_id <= USER_ID_MAX:
        raise ValidationError(f"id must be between {USER_ID_MIN} and {USER_ID_MAX}")
    return user_id


def _require_role(role_name: object) -> str:
    if role_name not in KNOWN_ROLES:
        raise ValidationError(f"role must be one of: {', '.join(KNOWN_ROLES)}")
    return role_name


class UserDirectory:
    """
    Business rules for user accounts on top of UserRepository.

    Every user returned from here is a SafeUser; credential hashes never leave
    this class.
    """

    def __init__(self, repository: UserRepository, hasher: PasswordHasher) -> None:
        self._repository = repository
        self._hasher = hasher

    def create_user(self, username: str, password: str) -> SafeUser:
        """
        Create a user with the default 'user' role.

        Raises ValidationError on blank input and ConflictError if the username is taken.
        """
        username = _require_text(username, "username", USERNAME_MAX_LEN).strip()
        _require_text(password, "password", PASSWORD_MAX_LEN)

        if self._repository.find_by_username(username) is not None:
            raise ConflictError("User already exists")

        account = UserAccount(
            username=username,
            password_hash=self._hasher.hash(password),
            created_at=datetime.now(UTC),
            is_banned=False,
        )
        account.id = self._repository.save(account)
        account.roles = {ROLE_USER}
        logger.info("Created user id=%s", account.id)
        return account.to_safe()

    def get_user_by_id(self, user_id: int) -> SafeUser | None:
        account = self._repository.find_by_id(_require_id(user_id))
        return account.to_safe() if account else None

    def get_user_by_username(self, username: str) -> SafeUser | None:
        if not isinstance(username, str):
            raise ValidationError("username must be a string")
        account = self._repository.find_by_username(username.strip())
        return account.to_safe() if account else None

    def get_all_users(self) -> list[SafeUser]:
        return [account.to_safe() for account in self._repository.find_all()]

    def delete_user_by_id(self, user_id: int) -> None:
        self._repository.delete_by_id(_require_id(user_id))

    def ban_user(self, user_id: int) -> None:
        self._repository.set_banned(_require_id(user_id), True)

    def unban_user(self, user_id: int) -> None:
        self._repository.set_banned(_require_id(user_id), False)

    def get_user_ban_status(self, user_id: int) -> bool:
        return self._repository.get_banned(_require_id(user_id))

    def grant_role(self, user_id: int, role_name: str) -> SafeUser | None:
        user_id = _require_id(user_id)
        self._repository.add_role(user_id, _require_role(role_name))
        logger.info("Granted role=%s to user id=%s", role_name, user_id)
        return self.get_user_by_id(user_id)

    def revoke_role(self, user_id: int, role_name: str) -> SafeUser | None:
        user_id = _require_id(user_id)
        if _require_role(role_name) == ROLE_USER:
            raise ValidationError("The default 'user' role cannot be revoked")
        self._repository.remove_role(user_id, role_name)
        logger.info("Revoked role=%s from user id=%s", role_name, user_id)
        return self.get_user_by_id(user_id)

    def authenticate_user(self, username: str, password: str) -> AuthResult:
        """
        Check a username/password pair.

        Ban status is checked before the password so a banned account never
        learns whether the password was right.
        """
        _require_text(username, "username", USERNAME_MAX_LEN)
        _require_text(password, "password", PASSWORD_MAX_LEN)

        account = self._repository.find_by_username(username.strip())
        if account is None:
            return AuthResult(
                success=False,
                message=MSG_USER_NOT_FOUND,
                failure=LoginFailure.USER_NOT_FOUND,
            )
        if account.is_banned:
            return AuthResult(
                success=False,
                message=MSG_USER_BANNED,
                failure=LoginFailure.BANNED,
            )
        if not self._hasher.verify(password, account.password_hash):
            return AuthResult(
                success=False,
                message=MSG_INVALID_PASSWORD,
                failure=LoginFailure.INVALID_PASSWORD,
            )
        return AuthResult(success=True, message="Authentication successful", user=account.to_safe())
