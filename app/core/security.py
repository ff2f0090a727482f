"""Password hashing and JWT issuance/verification."""

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import bcrypt
import jwt
from pydantic import ValidationError as PydanticValidationError

from app.core.errors import (
    HashingError,
    TokenExpiredError,
    TokenInvalidError,
    ValidationError,
)
from app.schemas.auth import TokenClaims

# Default bcrypt cost (log2 rounds).
DEFAULT_BCRYPT_ROUNDS = 10

# Min/max lengths for username and password validation.
USERNAME_MIN_LEN = 1
USERNAME_MAX_LEN = 255
PASSWORD_MIN_LEN = 1
PASSWORD_MAX_LEN = 128

# users.id is a 32-bit INTEGER column.
USER_ID_MIN = 1
USER_ID_MAX = 2**31 - 1

# bcrypt only looks at the first 72 bytes of the secret.
_BCRYPT_MAX_BYTES = 72

BEARER_PREFIX = "Bearer "


def _utcnow() -> datetime:
    return datetime.now(UTC)


class PasswordHasher:
    """Salted bcrypt hashing with a configurable cost factor."""

    def __init__(self, rounds: int = DEFAULT_BCRYPT_ROUNDS) -> None:
        self.rounds = rounds

    def hash(self, plain_password: str) -> str:
        """Hash a plain-text password for storage. Do not store plain passwords."""
        if not isinstance(plain_password, str) or not plain_password:
            raise ValidationError("password must be a non-empty string")
        pw_bytes = plain_password.encode("utf-8")[:_BCRYPT_MAX_BYTES]
        try:
            return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")
        except (ValueError, TypeError) as e:
            raise HashingError("Error hashing password", cause=e) from e

    def verify(self, plain_password: str, hashed: str) -> bool:
        """
        Verify a plain password against a stored hash.

        A mismatch returns False; a malformed hash or backend failure raises HashingError.
        """
        if not isinstance(plain_password, str) or not isinstance(hashed, str):
            raise HashingError("Error verifying password: expected string inputs")
        pw_bytes = plain_password.encode("utf-8")[:_BCRYPT_MAX_BYTES]
        try:
            return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
        except (ValueError, TypeError) as e:
            raise HashingError("Error verifying password", cause=e) from e


class TokenCodec:
    """Signs and verifies expiring HMAC JWTs carrying user id, username and roles."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        expire_minutes: int = 1440,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if not secret:
            raise ValueError("JWT secret must be non-empty")
        self._secret = secret
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes
        self._clock = clock

    def issue(self, claims: TokenClaims) -> str:
        """Create a JWT with sub (user id), username, roles, iat and exp."""
        now = self._clock()
        payload: dict[str, Any] = {
            "sub": str(claims.user_id),
            "username": claims.username,
            "roles": list(claims.roles),
            "iat": now,
            "exp": now + timedelta(minutes=self.expire_minutes),
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenClaims:
        """
        Decode and validate a JWT and return its claims.

        Raises TokenExpiredError past exp and TokenInvalidError for anything else
        (bad signature, malformed token, missing or mistyped claims).
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"require": ["exp", "sub"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise TokenExpiredError("Token has expired", cause=e) from e
        except jwt.PyJWTError as e:
            raise TokenInvalidError("Invalid token", cause=e) from e

        try:
            user_id = int(payload["sub"])
        except (TypeError, ValueError) as e:
            raise TokenInvalidError("Invalid token payload", cause=e) from e
        if not USER_ID_MIN <= user_id <= USER_ID_MAX:
            raise TokenInvalidError("Invalid token payload")
        username = payload.get("username")
        roles = payload.get("roles", [])
        if not isinstance(username, str) or not username or not isinstance(roles, list):
            raise TokenInvalidError("Invalid token payload")
        if not all(isinstance(role, str) for role in roles):
            raise TokenInvalidError("Invalid token payload")
        try:
            return TokenClaims(user_id=user_id, username=username, roles=roles)
        except PydanticValidationError as e:
            raise TokenInvalidError("Invalid token payload", cause=e) from e

    @staticmethod
    def extract_from_header(header_value: str | None) -> str | None:
        """Return the token from an exact 'Bearer <token>' header, otherwise None."""
        if not header_value or not header_value.startswith(BEARER_PREFIX):
            return None
        token = header_value[len(BEARER_PREFIX):]
        if not token or " " in token:
            return None
        return token
