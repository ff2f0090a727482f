"""Explicit wiring of repository, services and access gate for one process."""

from dataclasses import dataclass

from sqlalchemy import Engine
from sqlalchemy.orm import Session, sessionmaker

from app.core.config import Settings
from app.core.database import create_db_engine, create_session_factory
from app.core.security import PasswordHasher, TokenCodec
from app.services.access_gate import AccessGate
from app.services.auth_service import AuthService
from app.services.user_directory import UserDirectory
from app.services.user_repository import UserRepository


@dataclass(frozen=True)
class ServiceContainer:
    """Process-wide collaborators, built once at startup and handed to the HTTP layer."""

    settings: Settings
    engine: Engine
    session_factory: sessionmaker[Session]
    repository: UserRepository
    directory: UserDirectory
    auth: AuthService
    gate: AccessGate


def build_container(settings: Settings, engine: Engine | None = None) -> ServiceContainer:
    """Construct every collaborator from settings; pass engine to reuse an existing one."""
    engine = engine if engine is not None else create_db_engine(settings)
    session_factory = create_session_factory(engine)
    hasher = PasswordHasher(rounds=settings.BCRYPT_ROUNDS)
    codec = TokenCodec(
        secret=settings.JWT_SECRET.get_secret_value(),
        algorithm=settings.JWT_ALGORITHM,
        expire_minutes=settings.JWT_EXPIRE_MINUTES,
    )
    repository = UserRepository(session_factory)
    directory = UserDirectory(repository, hasher)
    return ServiceContainer(
        settings=settings,
        engine=engine,
        session_factory=session_factory,
        repository=repository,
        directory=directory,
        auth=AuthService(directory, codec),
        gate=AccessGate(codec, directory),
    )
