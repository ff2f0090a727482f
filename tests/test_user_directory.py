"""Unit tests for app.services.user_directory with a mocked repository."""

import unittest
from datetime import UTC, datetime
from unittest.mock import MagicMock

from app.core.errors import ConflictError, NotFoundError, ValidationError
from app.core.security import PasswordHasher
from app.schemas.auth import LoginFailure
from app.schemas.user import UserAccount
from app.services.user_directory import UserDirectory


def _stored(username: str = "u1", password: str = "p1", banned: bool = False, hasher=None) -> UserAccount:
    hasher = hasher or PasswordHasher(rounds=4)
    return UserAccount(
        id=1,
        username=username,
        password_hash=hasher.hash(password),
        created_at=datetime.now(UTC),
        is_banned=banned,
        roles={"user"},
    )


class DirectoryTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.repo = MagicMock()
        self.hasher = PasswordHasher(rounds=4)
        self.directory = UserDirectory(self.repo, self.hasher)


class TestCreateUser(DirectoryTestCase):
    """create_user validates, checks uniqueness, hashes and persists."""

    def test_creates_and_returns_safe_user(self) -> None:
        self.repo.find_by_username.return_value = None
        self.repo.save.return_value = 5
        user = self.directory.create_user("  u1 ", "p1")
        self.assertEqual(user.id, 5)
        self.assertEqual(user.username, "u1")
        self.assertEqual(user.roles, ["user"])
        self.assertNotIn("password_hash", user.model_dump())
        saved = self.repo.save.call_args.args[0]
        self.assertEqual(saved.username, "u1")
        self.assertNotEqual(saved.password_hash, "p1")
        self.assertTrue(self.hasher.verify("p1", saved.password_hash))

    def test_existing_username_conflicts(self) -> None:
        self.repo.find_by_username.return_value = _stored()
        with self.assertRaises(ConflictError):
            self.directory.create_user("u1", "p1")
        self.repo.save.assert_not_called()

    def test_blank_input_fails_before_io(self) -> None:
        for username, password in (("", "p1"), ("   ", "p1"), ("u1", ""), (None, "p1")):
            with self.subTest(username=username, password=password):
                with self.assertRaises(ValidationError):
                    self.directory.create_user(username, password)  # type: ignore[arg-type]
        self.repo.find_by_username.assert_not_called()


class TestLookups(DirectoryTestCase):
    """Lookups return safe projections or None."""

    def test_get_user_by_id_strips_hash(self) -> None:
        self.repo.find_by_id.return_value = _stored()
        user = self.directory.get_user_by_id(1)
        self.assertEqual(user.username, "u1")
        self.assertFalse(hasattr(user, "password_hash"))

    def test_get_user_by_id_missing(self) -> None:
        self.repo.find_by_id.return_value = None
        self.assertIsNone(self.directory.get_user_by_id(1))

    def test_get_all_users(self) -> None:
        self.repo.find_all.return_value = [_stored("a"), _stored("b")]
        self.assertEqual([u.username for u in self.directory.get_all_users()], ["a", "b"])

    def test_non_integer_ids_rejected(self) -> None:
        for bad in ("1", 1.0, True, None):
            with self.subTest(bad=bad):
                with self.assertRaises(ValidationError):
                    self.directory.ban_user(bad)  # type: ignore[arg-type]
        self.repo.set_banned.assert_not_called()

    def test_out_of_range_ids_rejected_before_io(self) -> None:
        for bad in (0, -1, 2**31, 10**20):
            with self.subTest(bad=bad):
                with self.assertRaises(ValidationError):
                    self.directory.get_user_by_id(bad)
                with self.assertRaises(ValidationError):
                    self.directory.ban_user(bad)
        self.repo.find_by_id.assert_not_called()
        self.repo.set_banned.assert_not_called()


class TestDeleteAndBan(DirectoryTestCase):
    """Delegates to the repository and surfaces NotFound unchanged."""

    def test_delete_delegates(self) -> None:
        self.directory.delete_user_by_id(3)
        self.repo.delete_by_id.assert_called_once_with(3)

    def test_ban_unban_delegate(self) -> None:
        self.directory.ban_user(3)
        self.directory.unban_user(3)
        self.assertEqual(
            [c.args for c in self.repo.set_banned.call_args_list],
            [(3, True), (3, False)],
        )

    def test_not_found_propagates(self) -> None:
        self.repo.get_banned.side_effect = NotFoundError("User not found")
        with self.assertRaises(NotFoundError):
            self.directory.get_user_ban_status(9)


class TestRoles(DirectoryTestCase):
    """grant_role/revoke_role accept only known roles and keep 'user'."""

    def test_grant_admin(self) -> None:
        self.repo.find_by_id.return_value = _stored()
        self.directory.grant_role(1, "admin")
        self.repo.add_role.assert_called_once_with(1, "admin")

    def test_unknown_role(self) -> None:
        with self.assertRaises(ValidationError):
            self.directory.grant_role(1, "root")

    def test_default_role_cannot_be_revoked(self) -> None:
        with self.assertRaises(ValidationError):
            self.directory.revoke_role(1, "user")
        self.repo.remove_role.assert_not_called()


class TestAuthenticateUser(DirectoryTestCase):
    """authenticate_user outcomes and check ordering."""

    def test_unknown_user(self) -> None:
        self.repo.find_by_username.return_value = None
        result = self.directory.authenticate_user("ghost", "p1")
        self.assertFalse(result.success)
        self.assertEqual(result.message, "User not found")
        self.assertIs(result.failure, LoginFailure.USER_NOT_FOUND)

    def test_banned_checked_before_password(self) -> None:
        self.repo.find_by_username.return_value = _stored(banned=True)
        hasher = MagicMock()
        directory = UserDirectory(self.repo, hasher)
        for password in ("p1", "wrong"):
            result = directory.authenticate_user("u1", password)
            self.assertFalse(result.success)
            self.assertEqual(result.message, "user has been banned")
            self.assertIs(result.failure, LoginFailure.BANNED)
        hasher.verify.assert_not_called()

    def test_wrong_password(self) -> None:
        self.repo.find_by_username.return_value = _stored(hasher=self.hasher)
        result = self.directory.authenticate_user("u1", "nope")
        self.assertFalse(result.success)
        self.assertEqual(result.message, "invalid password")
        self.assertIs(result.failure, LoginFailure.INVALID_PASSWORD)

    def test_success_returns_safe_user(self) -> None:
        self.repo.find_by_username.return_value = _stored(hasher=self.hasher)
        result = self.directory.authenticate_user("u1", "p1")
        self.assertTrue(result.success)
        self.assertEqual(result.user.username, "u1")
        self.assertIsNone(result.failure)


if __name__ == "__main__":
    unittest.main()
