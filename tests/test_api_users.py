"""End-to-end tests for the /api/users endpoints using FastAPI's TestClient."""

import unittest
from datetime import datetime, timedelta
from unittest.mock import patch

from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from listkeeper.core.config import get_settings
from listkeeper.core.database import get_db
from listkeeper.core.security import create_access_token, get_password_hasher
from listkeeper.main import app
from listkeeper.repositories.user_repository import UserRepository
from listkeeper.seed import seed_admin_user
from tests.support import make_hasher, make_session_factory

ADMIN_LOGIN = {"username": "Admin", "password": "AppleRocks!"}


def _new_user(**overrides: object) -> dict[str, object]:
    body: dict[str, object] = {
        "username": "alice",
        "email": "alice@example.com",
        "password": "ValidPassword123!",
        "role": "User",
        "firstname": "Test",
        "lastname": "User",
    }
    body.update(overrides)
    return body


class ApiTestCase(unittest.TestCase):
    """Fresh database with the seeded admin for every test."""

    def setUp(self) -> None:
        self.session_factory = make_session_factory()
        hasher = make_hasher()
        settings = get_settings()

        seed_session = self.session_factory()
        try:
            seed_admin_user(seed_session, settings, hasher)
        finally:
            seed_session.close()

        def override_get_db():
            db = self.session_factory()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db
        app.dependency_overrides[get_password_hasher] = lambda: hasher
        self.client = TestClient(app)
        self.prefix = f"{settings.API_PREFIX}/users"

    def tearDown(self) -> None:
        app.dependency_overrides.clear()

    def _login_headers(self, username: str, password: str) -> dict[str, str]:
        response = self.client.post(
            f"{self.prefix}/Authenticate", json={"username": username, "password": password}
        )
        self.assertEqual(response.status_code, 200)
        return {"Authorization": f"Bearer {response.json()['token']}"}

    def _admin_headers(self) -> dict[str, str]:
        return self._login_headers(ADMIN_LOGIN["username"], ADMIN_LOGIN["password"])


class TestRoot(ApiTestCase):
    def test_root_ok(self) -> None:
        response = self.client.get("/")
        self.assertEqual(response.status_code, 200)


class TestAuthenticateEndpoint(ApiTestCase):
    def test_seeded_admin_gets_token(self) -> None:
        response = self.client.post(f"{self.prefix}/Authenticate", json=ADMIN_LOGIN)
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertTrue(body["token"])
        self.assertEqual(body["role"], "Admin")
        self.assertEqual(body["created_by"], "System")
        self.assertNotIn("password_hash", body)
        self.assertNotIn("password", body)

    def test_wrong_password_401(self) -> None:
        response = self.client.post(
            f"{self.prefix}/Authenticate",
            json={"username": "Admin", "password": "ApplesRock!"},
        )
        self.assertEqual(response.status_code, 401)

    def test_unknown_user_401_same_detail(self) -> None:
        unknown = self.client.post(
            f"{self.prefix}/Authenticate",
            json={"username": "Nobody", "password": "AppleRocks!"},
        )
        wrong = self.client.post(
            f"{self.prefix}/Authenticate",
            json={"username": "Admin", "password": "wrong"},
        )
        self.assertEqual(unknown.status_code, 401)
        self.assertEqual(unknown.json(), wrong.json())

    def test_created_user_can_authenticate(self) -> None:
        headers = self._admin_headers()
        self.client.post(f"{self.prefix}/", json=_new_user(), headers=headers)

        ok = self.client.post(
            f"{self.prefix}/Authenticate",
            json={"username": "alice", "password": "ValidPassword123!"},
        )
        bad = self.client.post(
            f"{self.prefix}/Authenticate",
            json={"username": "alice", "password": "ValidPassword123?"},
        )
        self.assertEqual(ok.status_code, 200)
        self.assertTrue(ok.json()["token"])
        self.assertEqual(bad.status_code, 401)


class TestAuthorization(ApiTestCase):
    def test_list_without_token_401(self) -> None:
        response = self.client.get(f"{self.prefix}/")
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.headers.get("www-authenticate"), "Bearer")

    def test_garbage_token_401(self) -> None:
        response = self.client.get(
            f"{self.prefix}/", headers={"Authorization": "Bearer not-a-jwt"}
        )
        self.assertEqual(response.status_code, 401)

    def test_non_admin_403(self) -> None:
        self.client.post(f"{self.prefix}/", json=_new_user(), headers=self._admin_headers())
        headers = self._login_headers("alice", "ValidPassword123!")
        response = self.client.get(f"{self.prefix}/", headers=headers)
        self.assertEqual(response.status_code, 403)

    def test_token_for_unknown_user_401(self) -> None:
        token = create_access_token(42, "bob", "bob@example.com", "Admin")
        response = self.client.get(
            f"{self.prefix}/", headers={"Authorization": f"Bearer {token}"}
        )
        self.assertEqual(response.status_code, 401)

    def test_demoted_admin_token_403(self) -> None:
        admin = self._admin_headers()
        created = self.client.post(f"{self.prefix}/", json=_new_user(role="Admin"), headers=admin)
        user_id = created.json()["id"]
        alice = self._login_headers("alice", "ValidPassword123!")
        self.assertEqual(self.client.get(f"{self.prefix}/", headers=alice).status_code, 200)

        demoted = self.client.put(f"{self.prefix}/{user_id}", json=_new_user(), headers=admin)
        self.assertEqual(demoted.status_code, 200)

        self.assertEqual(self.client.get(f"{self.prefix}/", headers=alice).status_code, 403)

    def test_deleted_user_token_401(self) -> None:
        admin = self._admin_headers()
        created = self.client.post(f"{self.prefix}/", json=_new_user(role="Admin"), headers=admin)
        user_id = created.json()["id"]
        alice = self._login_headers("alice", "ValidPassword123!")

        self.client.delete(f"{self.prefix}/{user_id}", headers=admin)

        listed = self.client.get(f"{self.prefix}/", headers=alice)
        self.assertEqual(listed.status_code, 401)
        self.assertEqual(listed.headers.get("www-authenticate"), "Bearer")
        eve = _new_user(username="eve", email="eve@example.com")
        created_by_alice = self.client.post(f"{self.prefix}/", json=eve, headers=alice)
        self.assertEqual(created_by_alice.status_code, 401)

    def test_list_with_admin_token(self) -> None:
        response = self.client.get(f"{self.prefix}/", headers=self._admin_headers())
        self.assertEqual(response.status_code, 200)
        users = response.json()["users"]
        self.assertEqual([u["username"] for u in users], ["Admin"])


class TestUserValidation(ApiTestCase):
    def test_bad_email_422(self) -> None:
        response = self.client.post(
            f"{self.prefix}/", json=_new_user(email="not-an-email"), headers=self._admin_headers()
        )
        self.assertEqual(response.status_code, 422)

    def test_unknown_role_422(self) -> None:
        response = self.client.post(
            f"{self.prefix}/", json=_new_user(role="admin"), headers=self._admin_headers()
        )
        self.assertEqual(response.status_code, 422)

    def test_empty_username_422(self) -> None:
        response = self.client.post(
            f"{self.prefix}/", json=_new_user(username=""), headers=self._admin_headers()
        )
        self.assertEqual(response.status_code, 422)

    def test_duplicate_email_409(self) -> None:
        headers = self._admin_headers()
        first = self.client.post(f"{self.prefix}/", json=_new_user(), headers=headers)
        second = self.client.post(
            f"{self.prefix}/", json=_new_user(username="alice-two"), headers=headers
        )
        self.assertEqual(first.status_code, 201)
        self.assertEqual(second.status_code, 409)
        listed = self.client.get(f"{self.prefix}/", headers=headers).json()["users"]
        self.assertEqual(len(listed), 2)

    def test_unknown_id_404(self) -> None:
        headers = self._admin_headers()
        self.assertEqual(self.client.get(f"{self.prefix}/999", headers=headers).status_code, 404)
        self.assertEqual(
            self.client.put(f"{self.prefix}/999", json=_new_user(), headers=headers).status_code,
            404,
        )
        self.assertEqual(
            self.client.delete(f"{self.prefix}/999", headers=headers).status_code, 404
        )



class TestErrorResponses(ApiTestCase):
    """Unhandled failures become a generic 500 instead of escaping the app."""

    def setUp(self) -> None:
        super().setUp()
        self.client = TestClient(app, raise_server_exceptions=False)

    def test_storage_error_500(self) -> None:
        headers = self._admin_headers()
        error = OperationalError("SELECT", {}, Exception("database is locked"))
        with patch.object(UserRepository, "get_all", side_effect=error):
            response = self.client.get(f"{self.prefix}/", headers=headers)
        self.assertEqual(response.status_code, 500)
        self.assertEqual(
            response.json(), {"detail": "A storage error occurred while processing the request."}
        )

    def test_unexpected_error_500(self) -> None:
        headers = self._admin_headers()
        with patch.object(UserRepository, "get_all", side_effect=RuntimeError("boom")):
            response = self.client.get(f"{self.prefix}/", headers=headers)
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"detail": "An unexpected error occurred."})

class TestUserLifecycle(ApiTestCase):
    """Authenticate admin, create, get, update, delete, get again."""

    def test_crud_lifecycle(self) -> None:
        headers = self._admin_headers()
        submitted = _new_user(phone="555-0100")

        created = self.client.post(f"{self.prefix}/", json=submitted, headers=headers)
        self.assertEqual(created.status_code, 201)
        created_body = created.json()
        user_id = created_body["id"]
        self.assertTrue(created.headers["location"].endswith(f"/users/{user_id}"))
        self.assertEqual(created_body["created_by"], "Admin")
        self.assertEqual(created_body["created_at"], created_body["updated_at"])
        self.assertIsNone(created_body["deleted_at"])
        self.assertIsNone(created_body["token"])
        created_at = datetime.fromisoformat(created_body["created_at"])
        self.assertEqual(created_at.utcoffset(), timedelta(0))

        fetched = self.client.get(f"{self.prefix}/{user_id}", headers=headers)
        self.assertEqual(fetched.status_code, 200)
        fetched_body = fetched.json()
        for field in ("username", "email", "role", "firstname", "lastname", "phone"):
            self.assertEqual(fetched_body[field], submitted[field])

        update = dict(submitted, firstname="Test-Updated", password="ignored-on-update")
        updated = self.client.put(f"{self.prefix}/{user_id}", json=update, headers=headers)
        self.assertEqual(updated.status_code, 200)
        updated_body = updated.json()
        self.assertEqual(updated_body["firstname"], "Test-Updated")
        self.assertEqual(updated_body["username"], "alice")
        self.assertEqual(updated_body["email"], "alice@example.com")

        # The update must not have changed the password.
        login = self.client.post(
            f"{self.prefix}/Authenticate",
            json={"username": "alice", "password": "ValidPassword123!"},
        )
        self.assertEqual(login.status_code, 200)

        deleted = self.client.delete(f"{self.prefix}/{user_id}", headers=headers)
        self.assertEqual(deleted.status_code, 200)
        self.assertEqual(deleted.json()["id"], user_id)

        after = self.client.get(f"{self.prefix}/{user_id}", headers=headers)
        self.assertEqual(after.status_code, 200)
        self.assertIsNotNone(after.json()["deleted_at"])
        self.assertEqual(after.json()["deleted_by"], "Admin")

        again = self.client.delete(f"{self.prefix}/{user_id}", headers=headers)
        self.assertEqual(again.status_code, 404)

        relogin = self.client.post(
            f"{self.prefix}/Authenticate",
            json={"username": "alice", "password": "ValidPassword123!"},
        )
        self.assertEqual(relogin.status_code, 401)


if __name__ == "__main__":
    unittest.main()
