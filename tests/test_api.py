"""End-to-end tests for the HTTP API on an in-memory sqlite database."""

import unittest
from datetime import UTC, datetime, timedelta

import jwt
from fastapi.testclient import TestClient

from app.core.container import ServiceContainer
from app.main import create_app
from tests.support import TEST_JWT_SECRET, make_engine, make_settings


class ApiTestCase(unittest.TestCase):
    def setUp(self) -> None:
        settings = make_settings()
        self.engine = make_engine(settings)
        self.app = create_app(settings, engine=self.engine)
        self.container: ServiceContainer = self.app.state.container
        self.client = TestClient(self.app)
        self.client.__enter__()

    def tearDown(self) -> None:
        self.client.__exit__(None, None, None)
        self.engine.dispose()

    def register(self, username: str, password: str):
        return self.client.post("/api/auth/register", json={"username": username, "password": password})

    def login(self, username: str, password: str):
        return self.client.post("/api/auth/login", json={"username": username, "password": password})

    def token_for(self, username: str, password: str = "pw", admin: bool = False) -> tuple[int, str]:
        user_id = self.register(username, password).json()["user"]["id"]
        if admin:
            self.container.directory.grant_role(user_id, "admin")
        return user_id, self.login(username, password).json()["token"]

    @staticmethod
    def bearer(token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {token}"}


class TestRegisterLoginScenario(ApiTestCase):
    """register -> login -> me -> admin ban -> login rejected."""

    def test_full_flow(self) -> None:
        resp = self.register("u1", "p1")
        self.assertEqual(resp.status_code, 201)
        body = resp.json()
        self.assertTrue(body["success"])
        self.assertEqual(body["user"]["username"], "u1")
        self.assertEqual(body["user"]["roles"], ["user"])
        self.assertFalse(body["user"]["isBanned"])
        self.assertIn("createdAt", body["user"])
        self.assertNotIn("password", body["user"])
        self.assertNotIn("passwordHash", body["user"])
        self.assertNotIn("password_hash", body["user"])
        user_id = body["user"]["id"]

        resp = self.login("u1", "p1")
        self.assertEqual(resp.status_code, 200)
        token = resp.json()["token"]
        self.assertTrue(token)
        payload = jwt.decode(token, TEST_JWT_SECRET, algorithms=["HS256"])
        self.assertEqual(payload["username"], "u1")
        self.assertEqual(payload["sub"], str(user_id))

        resp = self.client.get("/api/auth/me", headers=self.bearer(token))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["user"]["username"], "u1")

        _, admin_token = self.token_for("boss", admin=True)
        resp = self.client.put(f"/api/users/{user_id}/ban", headers=self.bearer(admin_token))
        self.assertEqual(resp.status_code, 200)

        resp = self.login("u1", "p1")
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.json()["message"], "user has been banned")

        resp = self.client.get("/api/auth/me", headers=self.bearer(token))
        self.assertEqual(resp.status_code, 403)


class TestAuthEndpoints(ApiTestCase):
    def test_duplicate_registration_conflicts(self) -> None:
        self.assertEqual(self.register("dup", "pw").status_code, 201)
        resp = self.register("dup", "other")
        self.assertEqual(resp.status_code, 409)
        self.assertFalse(resp.json()["success"])
        self.assertEqual(len(self.container.directory.get_all_users()), 1)

    def test_missing_fields_is_400(self) -> None:
        resp = self.client.post("/api/auth/register", json={"username": "x"})
        self.assertEqual(resp.status_code, 400)
        self.assertIn("password", resp.json()["message"])
        resp = self.client.post("/api/auth/login", json={"username": "", "password": "pw"})
        self.assertEqual(resp.status_code, 400)

    def test_login_errors(self) -> None:
        self.register("u1", "p1")
        self.assertEqual(self.login("ghost", "p1").status_code, 404)
        resp = self.login("u1", "wrong")
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json()["message"], "invalid password")

    def test_me_requires_token(self) -> None:
        resp = self.client.get("/api/auth/me")
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.headers.get("WWW-Authenticate"), "Bearer")
        resp = self.client.get("/api/auth/me", headers={"Authorization": "Bearer junk"})
        self.assertEqual(resp.status_code, 401)

    def test_token_with_non_string_roles_is_401(self) -> None:
        user_id, _ = self.token_for("u1")
        token = jwt.encode(
            {"sub": str(user_id), "username": "u1", "roles": [1, "a"], "exp": datetime.now(UTC) + timedelta(minutes=5)},
            TEST_JWT_SECRET,
            algorithm="HS256",
        )
        resp = self.client.get("/api/auth/me", headers=self.bearer(token))
        self.assertEqual(resp.status_code, 401)

    def test_validate(self) -> None:
        _, token = self.token_for("u1")
        resp = self.client.post("/api/auth/validate", json={"username": "u1"}, headers=self.bearer(token))
        self.assertEqual(resp.status_code, 200)
        self.assertTrue(resp.json()["valid"])
        self.assertEqual(resp.json()["user"]["username"], "u1")

        resp = self.client.post("/api/auth/validate", json={"username": "u2"}, headers=self.bearer(token))
        self.assertEqual(resp.status_code, 401)
        resp = self.client.post("/api/auth/validate", json={"username": "u1"})
        self.assertEqual(resp.status_code, 401)

    def test_validate_deleted_user_is_401(self) -> None:
        user_id, token = self.token_for("gone")
        self.container.directory.delete_user_by_id(user_id)
        resp = self.client.post("/api/auth/validate", json={"username": "gone"}, headers=self.bearer(token))
        self.assertEqual(resp.status_code, 401)

    def test_deleted_user_token_rejected(self) -> None:
        user_id, token = self.token_for("gone")
        self.container.directory.delete_user_by_id(user_id)
        resp = self.client.get("/api/auth/me", headers=self.bearer(token))
        self.assertEqual(resp.status_code, 401)


class TestUserEndpoints(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.admin_id, admin_token = self.token_for("admin", admin=True)
        self.user_id, user_token = self.token_for("alice")
        self.admin = self.bearer(admin_token)
        self.user = self.bearer(user_token)

    def test_list_requires_admin(self) -> None:
        self.assertEqual(self.client.get("/api/users").status_code, 401)
        self.assertEqual(self.client.get("/api/users", headers=self.user).status_code, 403)
        resp = self.client.get("/api/users", headers=self.admin)
        self.assertEqual(resp.status_code, 200)
        names = [u["username"] for u in resp.json()["users"]]
        self.assertEqual(names, ["admin", "alice"])
        for u in resp.json()["users"]:
            self.assertNotIn("passwordHash", u)

    def test_self_get_allowed_other_forbidden(self) -> None:
        resp = self.client.get(f"/api/users/{self.user_id}", headers=self.user)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["user"]["username"], "alice")
        resp = self.client.get(f"/api/users/{self.admin_id}", headers=self.user)
        self.assertEqual(resp.status_code, 403)
        resp = self.client.get(f"/api/users/{self.user_id}", headers=self.admin)
        self.assertEqual(resp.status_code, 200)

    def test_get_unknown_and_invalid_id(self) -> None:
        self.assertEqual(self.client.get("/api/users/9999", headers=self.admin).status_code, 404)
        self.assertEqual(self.client.get("/api/users/abc", headers=self.admin).status_code, 400)

    def test_out_of_range_id_is_400(self) -> None:
        huge = "99999999999999999999"
        resp = self.client.get(f"/api/users/{huge}", headers=self.admin)
        self.assertEqual(resp.status_code, 400)
        self.assertFalse(resp.json()["success"])
        self.assertEqual(self.client.put(f"/api/users/{huge}/ban", headers=self.admin).status_code, 400)
        self.assertEqual(self.client.get("/api/users/0", headers=self.admin).status_code, 400)
        self.assertEqual(self.client.delete("/api/users/-1", headers=self.admin).status_code, 400)

    def test_admin_create_user(self) -> None:
        resp = self.client.post("/api/users", json={"username": "bob", "password": "pw"}, headers=self.admin)
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.json()["user"]["roles"], ["user"])
        resp = self.client.post("/api/users", json={"username": "carol", "password": "pw"}, headers=self.user)
        self.assertEqual(resp.status_code, 403)

    def test_delete(self) -> None:
        resp = self.client.delete(f"/api/users/{self.user_id}", headers=self.admin)
        self.assertEqual(resp.status_code, 200)
        self.assertIsNone(self.container.directory.get_user_by_id(self.user_id))
        resp = self.client.delete(f"/api/users/{self.user_id}", headers=self.admin)
        self.assertEqual(resp.status_code, 404)

    def test_ban_unban_and_status(self) -> None:
        url = f"/api/users/{self.user_id}"
        self.assertEqual(self.client.put(f"{url}/ban", headers=self.user).status_code, 403)
        self.assertEqual(self.client.put(f"{url}/ban", headers=self.admin).status_code, 200)
        resp = self.client.get(f"{url}/ban-status", headers=self.admin)
        self.assertEqual(resp.json(), {"success": True, "userId": self.user_id, "isBanned": True})
        self.assertEqual(self.client.put(f"{url}/unban", headers=self.admin).status_code, 200)
        self.assertEqual(self.login("alice", "pw").status_code, 200)
        self.assertEqual(self.client.put("/api/users/9999/ban", headers=self.admin).status_code, 404)
        self.assertEqual(self.client.put("/api/users/x/unban", headers=self.admin).status_code, 400)

    def test_role_grant_and_revoke(self) -> None:
        url = f"/api/users/{self.user_id}/roles"
        resp = self.client.put(f"{url}/admin", headers=self.admin)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["user"]["roles"], ["admin", "user"])
        self.assertEqual(self.client.delete(f"{url}/user", headers=self.admin).status_code, 400)
        resp = self.client.delete(f"{url}/admin", headers=self.admin)
        self.assertEqual(resp.json()["user"]["roles"], ["user"])
        self.assertEqual(self.client.put(f"{url}/root", headers=self.admin).status_code, 400)


class TestMisc(ApiTestCase):
    def test_root_and_health(self) -> None:
        self.assertEqual(self.client.get("/").status_code, 200)
        resp = self.client.get("/api/health")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["database"], "connected")
        self.assertEqual(resp.json()["environment"], "dev")

    def test_unknown_route(self) -> None:
        resp = self.client.get("/api/nope")
        self.assertEqual(resp.status_code, 404)
        self.assertFalse(resp.json()["success"])

    def test_roles_seeded_on_startup(self) -> None:
        self.assertEqual(self.container.repository.count_roles(), 2)


if __name__ == "__main__":
    unittest.main()
