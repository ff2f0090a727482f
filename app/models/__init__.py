"""SQLAlchemy ORM models."""

from app.models.base import Base
from app.models.role import DEFAULT_ROLE_ID, DEFAULT_ROLES, Role, UserRole
from app.models.user import User

__all__ = ["Base", "DEFAULT_ROLE_ID", "DEFAULT_ROLES", "Role", "User", "UserRole"]
