"""User management endpoints. Admin only, except a user reading their own record."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, status

from app.api.deps import get_container, get_current_claims, require_admin
from app.core.container import ServiceContainer
from app.core.errors import ForbiddenError, NotFoundError
from app.core.security import USER_ID_MAX, USER_ID_MIN
from app.schemas.auth import TokenClaims
from app.schemas.user import (
    ROLE_ADMIN,
    BanStatusResponse,
    CreateUserRequest,
    MessageResponse,
    UserResponse,
    UsersListResponse,
)

router = APIRouter()

AdminClaims = Annotated[TokenClaims, Depends(require_admin)]
Container = Annotated[ServiceContainer, Depends(get_container)]
UserId = Annotated[int, Path(ge=USER_ID_MIN, le=USER_ID_MAX)]


@router.get("", response_model=UsersListResponse)
def list_users(_admin: AdminClaims, container: Container) -> UsersListResponse:
    """List all users ordered by id."""
    return UsersListResponse(users=container.directory.get_all_users())


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(body: CreateUserRequest, _admin: AdminClaims, container: Container) -> UserResponse:
    user = container.directory.create_user(body.username, body.password)
    return UserResponse(message="User created successfully", user=user)


@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: UserId,
    claims: Annotated[TokenClaims, Depends(get_current_claims)],
    container: Container,
) -> UserResponse:
    """Admins may read any user; everyone else only themselves."""
    if ROLE_ADMIN not in claims.roles and claims.user_id != user_id:
        raise ForbiddenError("You can only access your own user data")
    user = container.directory.get_user_by_id(user_id)
    if user is None:
        raise NotFoundError("User not found")
    return UserResponse(user=user)


@router.delete("/{user_id}", response_model=MessageResponse)
def delete_user(user_id: UserId, _admin: AdminClaims, container: Container) -> MessageResponse:
    container.directory.delete_user_by_id(user_id)
    return MessageResponse(message="User deleted successfully")


@router.put("/{user_id}/ban", response_model=MessageResponse)
def ban_user(user_id: UserId, _admin: AdminClaims, container: Container) -> MessageResponse:
    container.directory.ban_user(user_id)
    return MessageResponse(message="User banned successfully")


@router.put("/{user_id}/unban", response_model=MessageResponse)
def unban_user(user_id: UserId, _admin: AdminClaims, container: Container) -> MessageResponse:
    container.directory.unban_user(user_id)
    return MessageResponse(message="User unbanned successfully")


@router.get("/{user_id}/ban-status", response_model=BanStatusResponse)
def ban_status(user_id: UserId, _admin: AdminClaims, container: Container) -> BanStatusResponse:
    banned = container.directory.get_user_ban_status(user_id)
    return BanStatusResponse(user_id=user_id, is_banned=banned)


@router.put("/{user_id}/roles/{role_name}", response_model=UserResponse)
def grant_role(user_id: UserId, role_name: str, _admin: AdminClaims, container: Container) -> UserResponse:
    """Add a role; takes effect in tokens issued after the change."""
    user = container.directory.grant_role(user_id, role_name)
    if user is None:
        raise NotFoundError("User not found")
    return UserResponse(message=f"Role '{role_name}' granted", user=user)


@router.delete("/{user_id}/roles/{role_name}", response_model=UserResponse)
def revoke_role(user_id: UserId, role_name: str, _admin: AdminClaims, container: Container) -> UserResponse:
    user = container.directory.revoke_role(user_id, role_name)
    if user is None:
        raise NotFoundError("User not found")
    return UserResponse(message=f"Role '{role_name}' revoked", user=user)
