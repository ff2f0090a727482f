"""ORM model for application user accounts."""

from sqlalchemy import Boolean, Column, DateTime, Integer, String, false, func

from app.models.base import Base


class User(Base):
    """
    User account for JWT authentication.

    Roles live in the user_roles join table; every account has at least 'user'.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    is_banned = Column(Boolean, nullable=False, default=False, server_default=false())
