"""User entity and its client-safe projection."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

ROLE_USER = "user"
ROLE_ADMIN = "admin"
KNOWN_ROLES = (ROLE_USER, ROLE_ADMIN)


class SafeUser(BaseModel):
    """
    User as returned to clients: never carries the credential hash.

    Serialized with camelCase keys (createdAt, isBanned).
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: int | None
    username: str
    created_at: datetime
    is_banned: bool = False
    roles: list[str] = Field(default_factory=list)


class UserAccount(BaseModel):
    """
    Identity, credential and status of one user.

    id is None until the store assigns one. password_hash is opaque and is
    dropped by to_safe(), the only projection that reaches a response.
    """

    id: int | None = None
    username: str
    password_hash: str = Field(..., repr=False)
    created_at: datetime
    is_banned: bool = False
    roles: set[str] = Field(default_factory=set)

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("username must be a string and not empty")
        return v

    @field_validator("password_hash")
    @classmethod
    def validate_password_hash(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("password hash can't be empty")
        return v

    def has_role(self, role_name: str) -> bool:
        return role_name in self.roles

    def is_admin(self) -> bool:
        return self.has_role(ROLE_ADMIN)

    def to_safe(self) -> SafeUser:
        return SafeUser(
            id=self.id,
            username=self.username,
            created_at=self.created_at,
            is_banned=self.is_banned,
            roles=sorted(self.roles),
        )


class CreateUserRequest(BaseModel):
    """Admin request to create a user."""

    username: str = Field(..., min_length=1, max_length=255, description="Username")
    password: str = Field(..., min_length=1, max_length=128, description="Password")


class UserResponse(BaseModel):
    """Single user envelope."""

    success: bool = True
    message: str | None = None
    user: SafeUser


class UsersListResponse(BaseModel):
    """Response for GET /users (admin only)."""

    success: bool = True
    users: list[SafeUser]


class MessageResponse(BaseModel):
    """Plain success/message envelope."""

    success: bool = True
    message: str


class BanStatusResponse(BaseModel):
    """Ban status for one user."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool = True
    user_id: int
    is_banned: bool
