"""Pydantic request/response schemas and domain records."""

from app.schemas.auth import (
    AuthResult,
    LoginFailure,
    LoginRequest,
    LoginResult,
    RegisterRequest,
    TokenClaims,
    ValidateRequest,
)
from app.schemas.health import HealthResponse
from app.schemas.user import (
    ROLE_ADMIN,
    ROLE_USER,
    CreateUserRequest,
    SafeUser,
    UserAccount,
)

__all__ = [
    "AuthResult",
    "CreateUserRequest",
    "HealthResponse",
    "LoginFailure",
    "LoginRequest",
    "LoginResult",
    "RegisterRequest",
    "ROLE_ADMIN",
    "ROLE_USER",
    "SafeUser",
    "TokenClaims",
    "UserAccount",
    "ValidateRequest",
]
