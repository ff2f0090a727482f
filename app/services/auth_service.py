"""Registration, login and token validation."""

import logging

from app.core.errors import (
    AuthenticationError,
    ForbiddenError,
    NotFoundError,
    TokenError,
    ValidationError,
)
from app.core.security import TokenCodec
from app.schemas.auth import LoginFailure, LoginResult, TokenClaims
from app.schemas.user import SafeUser
from app.services.user_directory import UserDirectory

logger = logging.getLogger(__name__)


class AuthService:
    """Orchestrates UserDirectory and TokenCodec for the auth endpoints."""

    def __init__(self, directory: UserDirectory, codec: TokenCodec) -> None:
        self._directory = directory
        self._codec = codec

    def register(self, username: str, password: str) -> SafeUser:
        """Create an account; a taken username surfaces as ConflictError from the directory."""
        if not username or not password:
            raise ValidationError("Username and password are required")
        return self._directory.create_user(username, password)

    def login(self, username: str, password: str) -> LoginResult:
        """
        Authenticate and issue a token.

        Unknown user -> NotFoundError, banned -> ForbiddenError, wrong password
        -> AuthenticationError.
        """
        if not username or not password:
            raise ValidationError("Username and password are required")

        result = self._directory.authenticate_user(username, password)
        if not result.success:
            logger.info("Login rejected: reason=%s", result.failure.value if result.failure else "unknown")
            if result.failure is LoginFailure.USER_NOT_FOUND:
                raise NotFoundError(result.message)
            if result.failure is LoginFailure.BANNED:
                raise ForbiddenError(result.message)
            raise AuthenticationError(result.message)

        user = result.user
        token = self._codec.issue(
            TokenClaims(user_id=user.id, username=user.username, roles=user.roles)
        )
        return LoginResult(token=token, user=user)

    def validate_token(self, user_id: int) -> SafeUser:
        """
        Re-check the live account behind a token.

        Catches tokens that are still cryptographically valid for accounts that
        were deleted or banned after issuance.
        """
        user = self._directory.get_user_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        if user.is_banned:
            raise ForbiddenError("User is banned")
        return user

    def validate_token_with_username(self, token: str, username: str) -> SafeUser:
        """Verify the token, require its username claim to match, then re-check the live account."""
        if not token:
            raise AuthenticationError("Authentication required")
        try:
            claims = self._codec.verify(token)
        except TokenError as e:
            raise AuthenticationError("Invalid or expired token", cause=e) from e
        if not username or claims.username != username:
            raise AuthenticationError("Token does not belong to this user")
        return self.validate_token(claims.user_id)
