"""Persistence of user accounts across the users, roles and user_roles tables."""

import logging
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import Any

from sqlalchemy import Select, delete, func, insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from app.core.errors import ConflictError, NotFoundError, StoreError
from app.models import DEFAULT_ROLE_ID, DEFAULT_ROLES, Role, User, UserRole
from app.schemas.user import UserAccount

logger = logging.getLogger(__name__)


@contextmanager
def _store_errors(operation: str, user_id: int | None = None) -> Iterator[None]:
    """Re-raise driver/ORM failures as StoreError; domain errors pass through."""
    try:
        yield
    except SQLAlchemyError as e:
        logger.error(
            "Store operation failed: operation=%s user_id=%s error=%s",
            operation,
            user_id,
            type(e).__name__,
        )
        raise StoreError(f"Database error during {operation}", cause=e) from e


def _user_with_roles_query() -> Select:
    return (
        select(User, Role.name)
        .outerjoin(UserRole, UserRole.user_id == User.id)
        .outerjoin(Role, Role.id == UserRole.role_id)
    )


def _aggregate(rows: Sequence[Any]) -> list[UserAccount]:
    """
    Fold (user, role_name) rows into one UserAccount per user.

    A user with no roles yields a single row with role_name None from the
    left join; those placeholders are dropped.
    """
    accounts: dict[int, UserAccount] = {}
    for record, role_name in rows:
        account = accounts.get(record.id)
        if account is None:
            account = UserAccount(
                id=record.id,
                username=record.username,
                password_hash=record.password_hash,
                created_at=record.created_at,
                is_banned=bool(record.is_banned),
            )
            accounts[record.id] = account
        if role_name is not None:
            account.roles.add(role_name)
    return list(accounts.values())


class UserRepository:
    """
    Maps UserAccount to persisted rows.

    Every call acquires its own session inside a `with` block so the pooled
    connection is returned on success and on every error path. Multi-statement
    writes run inside one transaction.
    """

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def save(self, user: UserAccount) -> int:
        """
        Insert the user and link the default 'user' role in one transaction.

        Returns the generated id. Any failure rolls back both inserts.
        """
        try:
            with self._session_factory.begin() as session:
                record = User(
                    username=user.username,
                    password_hash=user.password_hash,
                    created_at=user.created_at,
                    is_banned=user.is_banned,
                )
                session.add(record)
                session.flush()
                session.add(UserRole(user_id=record.id, role_id=DEFAULT_ROLE_ID))
                session.flush()
                user_id = record.id
        except IntegrityError as e:
            # Unique username lost a race with a concurrent registration
            if self.find_by_username(user.username) is not None:
                raise ConflictError("User already exists", cause=e) from e
            logger.error("Store operation failed: operation=save error=%s", type(e).__name__)
            raise StoreError("Database error during save", cause=e) from e
        except SQLAlchemyError as e:
            logger.error("Store operation failed: operation=save error=%s", type(e).__name__)
            raise StoreError("Database error during save", cause=e) from e
        logger.info("Saved user id=%s", user_id)
        return user_id

    def find_by_id(self, user_id: int) -> UserAccount | None:
        with _store_errors("find_by_id", user_id), self._session_factory() as session:
            rows = session.execute(
                _user_with_roles_query().where(User.id == user_id)
            ).all()
        accounts = _aggregate(rows)
        return accounts[0] if accounts else None

    def find_by_username(self, username: str) -> UserAccount | None:
        with _store_errors("find_by_username"), self._session_factory() as session:
            rows = session.execute(
                _user_with_roles_query().where(User.username == username)
            ).all()
        accounts = _aggregate(rows)
        return accounts[0] if accounts else None

    def find_all(self) -> list[UserAccount]:
        with _store_errors("find_all"), self._session_factory() as session:
            rows = session.execute(_user_with_roles_query().order_by(User.id)).all()
        return _aggregate(rows)

    def delete_by_id(self, user_id: int) -> None:
        """
        Delete role links then the user row in one transaction.

        Raises NotFoundError when no user row matched; the transaction is rolled
        back so nothing is removed.
        """
        with _store_errors("delete_by_id", user_id), self._session_factory.begin() as session:
            session.execute(delete(UserRole).where(UserRole.user_id == user_id))
            result = session.execute(delete(User).where(User.id == user_id))
            if result.rowcount == 0:
                raise NotFoundError("User not found")
        logger.info("Deleted user id=%s", user_id)

    def set_banned(self, user_id: int, banned: bool) -> None:
        with _store_errors("set_banned", user_id), self._session_factory.begin() as session:
            result = session.execute(
                update(User).where(User.id == user_id).values(is_banned=banned)
            )
            if result.rowcount == 0:
                raise NotFoundError("User not found")
        logger.info("Set is_banned=%s for user id=%s", banned, user_id)

    def get_banned(self, user_id: int) -> bool:
        with _store_errors("get_banned", user_id), self._session_factory() as session:
            banned = session.execute(
                select(User.is_banned).where(User.id == user_id)
            ).scalar_one_or_none()
        if banned is None:
            raise NotFoundError("User not found")
        return bool(banned)

    def add_role(self, user_id: int, role_name: str) -> None:
        """Link role_name to the user; linking an already-held role is a no-op."""
        with _store_errors("add_role", user_id), self._session_factory.begin() as session:
            role_id = self._role_id(session, role_name)
            if session.get(User, user_id) is None:
                raise NotFoundError("User not found")
            if session.get(UserRole, (user_id, role_id)) is None:
                session.add(UserRole(user_id=user_id, role_id=role_id))

    def remove_role(self, user_id: int, role_name: str) -> None:
        with _store_errors("remove_role", user_id), self._session_factory.begin() as session:
            role_id = self._role_id(session, role_name)
            if session.get(User, user_id) is None:
                raise NotFoundError("User not found")
            session.execute(
                delete(UserRole).where(
                    UserRole.user_id == user_id, UserRole.role_id == role_id
                )
            )

    def count_roles(self) -> int:
        with _store_errors("count_roles"), self._session_factory() as session:
            return session.execute(select(func.count()).select_from(Role)).scalar_one()

    def seed_default_roles(self) -> bool:
        """Insert (1, 'user') and (2, 'admin') when the roles table is empty. Returns True if seeded."""
        with _store_errors("seed_default_roles"), self._session_factory.begin() as session:
            count = session.execute(select(func.count()).select_from(Role)).scalar_one()
            if count:
                return False
            session.execute(
                insert(Role),
                [{"id": role_id, "name": name} for role_id, name in DEFAULT_ROLES],
            )
        logger.info("Default roles have been created")
        return True

    @staticmethod
    def _role_id(session: Session, role_name: str) -> int:
        role_id = session.execute(
            select(Role.id).where(Role.name == role_name)
        ).scalar_one_or_none()
        if role_id is None:
            raise NotFoundError(f"Role not found: {role_name}")
        return role_id
