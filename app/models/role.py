"""ORM models for roles and the user/role join table."""

from sqlalchemy import Column, ForeignKey, Integer, String

from app.models.base import Base

DEFAULT_ROLE_ID = 1

# Seed rows inserted when the roles table is empty: (id, name).
DEFAULT_ROLES = ((1, "user"), (2, "admin"))


class Role(Base):
    """Fixed reference role ('user' or 'admin')."""

    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String(32), nullable=False, unique=True)


class UserRole(Base):
    """Many-to-many link between users and roles."""

    __tablename__ = "user_roles"

    user_id = Column(Integer, ForeignKey("users.id"), primary_key=True)
    role_id = Column(Integer, ForeignKey("roles.id"), primary_key=True)
