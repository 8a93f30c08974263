import unittest
from datetime import timedelta
from uuid import uuid4

from fastapi.testclient import TestClient

from tests.base import BASE_TIME, DatabaseTestCase

from tasktracker.core.config import settings
from tasktracker.core.security import TOKEN_ACCESS, TOKEN_REFRESH, create_token, decode_jwt
from tasktracker.db.session import get_db
from tasktracker.main import app
from tasktracker.services.auth_service import token_claims


class ApiTestCase(DatabaseTestCase):
    def setUp(self):
        super().setUp()

        def override_get_db():
            db = self.SessionLocal()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db
        self.client = TestClient(app)

    def tearDown(self):
        self.client.close()
        app.dependency_overrides.clear()
        super().tearDown()

    def auth_headers(self, user) -> dict:
        return {"Authorization": f"Bearer {create_token(token_claims(user), TOKEN_ACCESS)}"}


class AuthApiTests(ApiTestCase):
    def test_register_then_login(self):
        response = self.client.post(
            "/api/auth/register",
            json={"email": "New@Example.com", "full_name": "New User", "password": "secret123"},
        )
        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertEqual(body["user"]["email"], "new@example.com")
        self.assertEqual(body["user"]["role"], "user")
        self.assertNotIn("password_hash", body["user"])
        self.assertIn(settings.REFRESH_COOKIE_NAME, response.cookies)

        response = self.client.post("/api/auth/login", json={"email": "new@example.com", "password": "secret123"})
        self.assertEqual(response.status_code, 200)
        claims = decode_jwt(response.json()["access_token"], settings.JWT_SECRET)
        self.assertEqual(claims["email"], "new@example.com")
        self.assertEqual(claims["type"], TOKEN_ACCESS)

    def test_register_duplicate_email_is_409(self):
        self.make_user(email="taken@example.com")
        response = self.client.post(
            "/api/auth/register",
            json={"email": "taken@example.com", "full_name": "Dup", "password": "secret123"},
        )
        self.assertEqual(response.status_code, 409)

    def test_login_with_wrong_password_is_401(self):
        self.make_user(email="user@example.com")
        response = self.client.post("/api/auth/login", json={"email": "user@example.com", "password": "wrong-pass"})
        self.assertEqual(response.status_code, 401)

    def test_me_requires_token(self):
        self.assertEqual(self.client.get("/api/auth/me").status_code, 401)
        user = self.make_user()
        response = self.client.get("/api/auth/me", headers=self.auth_headers(user))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["id"], str(user.id))

    def test_refresh_token_is_not_an_access_token(self):
        user = self.make_user()
        refresh = create_token(token_claims(user), TOKEN_REFRESH)
        response = self.client.get("/api/auth/me", headers={"Authorization": f"Bearer {refresh}"})
        self.assertEqual(response.status_code, 401)

    def test_refresh_issues_new_tokens(self):
        user = self.make_user()
        self.client.cookies.set(settings.REFRESH_COOKIE_NAME, create_token(token_claims(user), TOKEN_REFRESH))
        response = self.client.post("/api/auth/refresh")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["user"]["id"], str(user.id))

    def test_refresh_without_cookie_is_401(self):
        self.assertEqual(self.client.post("/api/auth/refresh").status_code, 401)


class TaskApiTests(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.owner = self.make_user()
        self.headers = self.auth_headers(self.owner)

    def test_list_tasks_paginates(self):
        self.make_tasks(self.owner, 23)
        response = self.client.get("/api/tasks", params={"limit": "10"}, headers=self.headers)
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["totalCount"], 23)
        self.assertEqual(body["pages"], 3)
        self.assertEqual(len(body["items"]), 10)
        self.assertEqual(body["items"][0]["title"], "Task 23")

    def test_list_tasks_second_page_ascending(self):
        self.make_tasks(self.owner, 12)
        response = self.client.get(
            "/api/tasks",
            params={"page": "2", "limit": "5", "sortKey": "created_at", "sortAsc": "true"},
            headers=self.headers,
        )
        self.assertEqual([t["title"] for t in response.json()["items"]], ["Task 06", "Task 07", "Task 08", "Task 09", "Task 10"])

    def test_invalid_pagination_falls_back_to_defaults(self):
        self.make_tasks(self.owner, 12)
        response = self.client.get("/api/tasks", params={"page": "abc", "limit": "500"}, headers=self.headers)
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(len(body["items"]), 10)
        self.assertEqual(body["pages"], 2)

    def test_list_tasks_with_filters_and_relation(self):
        self.make_tasks(self.owner, 3, status="completed")
        self.make_tasks(self.owner, 2, title="Quarterly report", created_at=BASE_TIME + timedelta(hours=1))
        response = self.client.get(
            "/api/tasks",
            params={"title": "REPORT", "status": "todo", "relations": "user"},
            headers=self.headers,
        )
        body = response.json()
        self.assertEqual(body["totalCount"], 2)
        self.assertEqual(body["items"][0]["user"]["email"], "owner@example.com")

    def test_get_task_with_user_relation(self):
        task_id = str(self.make_tasks(self.owner, 1)[0].id)
        plain = self.client.get(f"/api/tasks/{task_id}", headers=self.headers)
        self.assertIsNone(plain.json()["user"])
        loaded = self.client.get(f"/api/tasks/{task_id}", params={"relations": "user"}, headers=self.headers)
        self.assertEqual(loaded.status_code, 200)
        self.assertEqual(loaded.json()["user"]["email"], "owner@example.com")

    def test_page_beyond_largest_offset_is_first_page(self):
        self.make_tasks(self.owner, 12)
        response = self.client.get("/api/tasks", params={"page": "99999999999999999999"}, headers=self.headers)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["items"][0]["title"], "Task 12")

    def test_filter_matching_nothing(self):
        self.make_tasks(self.owner, 3)
        response = self.client.get("/api/tasks", params={"created_at_start": "2030-01-01"}, headers=self.headers)
        self.assertEqual(response.json(), {"items": [], "totalCount": 0, "pages": 0})

    def test_invalid_filter_value_is_422(self):
        response = self.client.get("/api/tasks", params={"status": "done"}, headers=self.headers)
        self.assertEqual(response.status_code, 422)

    def test_task_lifecycle(self):
        response = self.client.post(
            "/api/tasks",
            json={"title": "Ship it", "status": "todo", "priority": "high", "due_date": "2026-03-10"},
            headers=self.headers,
        )
        self.assertEqual(response.status_code, 201)
        task_id = response.json()["id"]

        response = self.client.patch(f"/api/tasks/{task_id}", json={"status": "completed"}, headers=self.headers)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "completed")
        self.assertEqual(response.json()["title"], "Ship it")

        self.assertEqual(self.client.get(f"/api/tasks/{task_id}", headers=self.headers).status_code, 200)
        self.assertEqual(self.client.delete(f"/api/tasks/{task_id}", headers=self.headers).status_code, 204)
        self.assertEqual(self.client.get(f"/api/tasks/{task_id}", headers=self.headers).status_code, 404)

    def test_other_users_task_is_not_found(self):
        stranger = self.make_user(email="stranger@example.com")
        task = self.make_tasks(stranger, 1)[0]
        task_id = str(task.id)
        self.assertEqual(self.client.get(f"/api/tasks/{task_id}", headers=self.headers).status_code, 404)
        response = self.client.patch(f"/api/tasks/{task_id}", json={"title": "mine"}, headers=self.headers)
        self.assertEqual(response.status_code, 404)
        self.assertEqual(self.client.delete(f"/api/tasks/{task_id}", headers=self.headers).status_code, 404)

    def test_update_missing_task_is_404(self):
        response = self.client.patch(f"/api/tasks/{uuid4()}", json={"title": "x"}, headers=self.headers)
        self.assertEqual(response.status_code, 404)

    def test_request_id_is_echoed(self):
        response = self.client.get("/health", headers={"X-Request-ID": "abc-123"})
        self.assertEqual(response.headers["X-Request-ID"], "abc-123")


class UserApiTests(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.admin = self.make_user(email="admin@example.com", full_name="Admin", role="admin")
        self.user = self.make_user(email="user@example.com", full_name="Plain User")

    def test_users_require_admin(self):
        response = self.client.get("/api/users", headers=self.auth_headers(self.user))
        self.assertEqual(response.status_code, 403)
        self.assertEqual(self.client.get("/api/users").status_code, 401)

    def test_admin_lists_and_filters_users(self):
        headers = self.auth_headers(self.admin)
        response = self.client.get("/api/users", params={"role": "user"}, headers=headers)
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["totalCount"], 1)
        self.assertEqual(body["items"][0]["email"], "user@example.com")

    def test_sorting_users_by_password_hash_uses_created_at(self):
        self.admin.created_at, self.admin.password_hash = BASE_TIME, "zzz"
        self.user.created_at, self.user.password_hash = BASE_TIME + timedelta(minutes=1), "aaa"
        self.db.commit()
        response = self.client.get(
            "/api/users", params={"sortKey": "password_hash", "sortAsc": "true"}, headers=self.auth_headers(self.admin)
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual([u["email"] for u in response.json()["items"]], ["admin@example.com", "user@example.com"])

    def test_admin_user_lifecycle(self):
        headers = self.auth_headers(self.admin)
        response = self.client.post(
            "/api/users",
            json={"email": "third@example.com", "full_name": "Third", "password": "secret123", "role": "admin"},
            headers=headers,
        )
        self.assertEqual(response.status_code, 201)
        user_id = response.json()["id"]
        response = self.client.patch(f"/api/users/{user_id}", json={"full_name": "Third Renamed"}, headers=headers)
        self.assertEqual(response.json()["full_name"], "Third Renamed")
        self.assertEqual(self.client.delete(f"/api/users/{user_id}", headers=headers).status_code, 204)
        self.assertEqual(self.client.get(f"/api/users/{user_id}", headers=headers).status_code, 404)


if __name__ == "__main__":
    unittest.main()
