"""Request/response schemas for auth endpoints, token claims and login outcomes."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.schemas.user import SafeUser


class LoginRequest(BaseModel):
    """Credentials for login."""

    username: str = Field(..., min_length=1, max_length=255, description="Username")
    password: str = Field(..., min_length=1, max_length=128, description="Password")


class RegisterRequest(LoginRequest):
    """Credentials for self-registration."""


class ValidateRequest(BaseModel):
    """Username the presented token must belong to."""

    username: str = Field(..., min_length=1, max_length=255, description="Username")


class TokenClaims(BaseModel):
    """Identity facts embedded in a signed token."""

    model_config = ConfigDict(frozen=True)

    user_id: int
    username: str
    roles: tuple[str, ...] = ()

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        if not v:
            raise ValueError("username claim must be non-empty")
        return v

    @field_validator("roles", mode="before")
    @classmethod
    def normalize_roles(cls, v: object) -> tuple[str, ...]:
        if v is None:
            return ()
        if not all(isinstance(role, str) for role in v):
            raise ValueError("roles claim must be a list of strings")
        return tuple(sorted(set(v)))


class LoginFailure(str, Enum):
    """Why authenticate_user rejected a login."""

    USER_NOT_FOUND = "user_not_found"
    BANNED = "banned"
    INVALID_PASSWORD = "invalid_password"


class AuthResult(BaseModel):
    """Outcome of a username/password check."""

    success: bool
    message: str
    user: SafeUser | None = None
    failure: LoginFailure | None = None


class LoginResult(BaseModel):
    """Issued token and the user it was issued for."""

    token: str
    user: SafeUser


class RegisterResponse(BaseModel):
    success: bool = True
    message: str = "User registered successfully"
    user: SafeUser


class LoginResponse(BaseModel):
    success: bool = True
    message: str = "Login successful"
    token: str
    user: SafeUser


class ValidateResponse(BaseModel):
    valid: bool = True
    message: str = "Token is valid"
    user: SafeUser


class CurrentUserResponse(BaseModel):
    success: bool = True
    user: SafeUser
