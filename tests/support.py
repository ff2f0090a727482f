"""Shared builders for tests: settings, in-memory sqlite engine, wired services."""

from sqlalchemy import Engine

from app.core.config import Settings
from app.core.container import ServiceContainer, build_container
from app.core.database import create_db_engine
from app.models import Base

TEST_JWT_SECRET = "test-jwt-secret"


def make_settings(**overrides: object) -> Settings:
    """Settings for tests: in-memory sqlite, low bcrypt cost, no .env file."""
    values: dict[str, object] = {
        "APP_ENV": "dev",
        "DEBUG": False,
        "DATABASE_URL": "sqlite://",
        "JWT_SECRET": TEST_JWT_SECRET,
        "BCRYPT_ROUNDS": 4,
        "LOG_LEVEL": "WARNING",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def make_engine(settings: Settings | None = None) -> Engine:
    """Fresh in-memory database with all tables created."""
    engine = create_db_engine(settings or make_settings())
    Base.metadata.create_all(engine)
    return engine


def make_container(seed_roles: bool = True) -> ServiceContainer:
    settings = make_settings()
    container = build_container(settings, engine=make_engine(settings))
    if seed_roles:
        container.repository.seed_default_roles()
    return container
