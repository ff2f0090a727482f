"""Core app configuration, database, security and errors."""

from app.core.config import Settings, get_settings
from app.core.errors import AppError, ErrorKind

__all__ = ["AppError", "ErrorKind", "Settings", "get_settings"]
