"""Registration, login, token validation and current-user endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Header, status

from app.api.deps import get_container, get_current_claims
from app.core.container import ServiceContainer
from app.core.errors import AuthenticationError, ForbiddenError, NotFoundError
from app.core.security import TokenCodec
from app.schemas.auth import (
    CurrentUserResponse,
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
    TokenClaims,
    ValidateRequest,
    ValidateResponse,
)

router = APIRouter()


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(
    body: RegisterRequest,
    container: Annotated[ServiceContainer, Depends(get_container)],
) -> RegisterResponse:
    """Create an account with the default 'user' role. 409 if the username is taken."""
    user = container.auth.register(body.username, body.password)
    return RegisterResponse(user=user)


@router.post("/login", response_model=LoginResponse)
def login(
    body: LoginRequest,
    container: Annotated[ServiceContainer, Depends(get_container)],
) -> LoginResponse:
    """
    Authenticate with username and password; returns a JWT.
    Include the token in the Authorization header as: Bearer <token>
    """
    result = container.auth.login(body.username, body.password)
    return LoginResponse(token=result.token, user=result.user)


@router.post("/validate", response_model=ValidateResponse)
def validate(
    body: ValidateRequest,
    container: Annotated[ServiceContainer, Depends(get_container)],
    authorization: Annotated[str | None, Header()] = None,
) -> ValidateResponse:
    """Check that the Bearer token is valid, belongs to `username`, and its account is still active."""
    token = TokenCodec.extract_from_header(authorization)
    if token is None:
        raise AuthenticationError("Authentication required")
    try:
        user = container.auth.validate_token_with_username(token, body.username)
    except (NotFoundError, ForbiddenError) as e:
        raise AuthenticationError(e.message, cause=e) from e
    return ValidateResponse(user=user)


@router.get("/me", response_model=CurrentUserResponse)
def me(
    claims: Annotated[TokenClaims, Depends(get_current_claims)],
    container: Annotated[ServiceContainer, Depends(get_container)],
) -> CurrentUserResponse:
    """Current user's profile, read from the store rather than the token."""
    return CurrentUserResponse(user=container.auth.validate_token(claims.user_id))
