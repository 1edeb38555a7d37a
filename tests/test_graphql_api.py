"""End-to-end tests for the GraphQL endpoint and REST health route via FastAPI TestClient."""

import asyncio
import unittest
from unittest.mock import MagicMock, patch

from fastapi.testclient import TestClient
from pydantic import SecretStr
from sqlalchemy.exc import OperationalError

from app import main as main_module
from app.core.database import get_db
from app.core.security import create_access_token
from app.main import app
from app.models import User, UserRole, UserStatus
from app.services import auth as auth_service
from tests.support import PASSWORD, make_session_factory, seed_scenario

USERS_QUERY = """
query Users($page: Int!, $limit: Int!, $search: String, $role: Role, $status: Status) {
  users(page: $page, limit: $limit, search: $search, role: $role, status: $status) {
    users { id name email role status profilePhoto location createdAt }
    totalCount
    totalPages
    currentPage
  }
}
"""

LOGIN_MUTATION = """
mutation Login($email: String!, $password: String!) {
  login(email: $email, password: $password) { token user { id email role status } }
}
"""


class GraphQLTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.session_factory = make_session_factory()
        self.db = self.session_factory()
        self.users = seed_scenario(self.db)
        self.admin = self.users[0]
        self.member = self.users[6]

        def override_get_db():
            db = self.session_factory()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db
        self.client = TestClient(app)

    def tearDown(self) -> None:
        app.dependency_overrides.clear()
        self.db.close()

    def _token(self, user: User) -> str:
        return create_access_token(sub=user.id, role=user.role.value)

    def gql(self, query: str, variables: dict | None = None, token: str | None = None) -> dict:
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        response = self.client.post(
            "/graphql",
            json={"query": query, "variables": variables or {}},
            headers=headers,
        )
        self.assertEqual(response.status_code, 200, response.text)
        return response.json()

    def assertErrorCode(self, body: dict, code: str) -> None:
        self.assertIn("errors", body, body)
        self.assertEqual(body["errors"][0]["extensions"]["code"], code, body)


class TestAuthMutations(GraphQLTestCase):
    def test_login_returns_token_and_user(self) -> None:
        body = self.gql(LOGIN_MUTATION, {"email": self.admin.email, "password": PASSWORD})
        self.assertNotIn("errors", body, body)
        payload = body["data"]["login"]
        self.assertTrue(payload["token"])
        self.assertEqual(payload["user"]["id"], self.admin.id)
        self.assertEqual(payload["user"]["role"], "ADMIN")

    def test_login_failure_code(self) -> None:
        wrong = self.gql(LOGIN_MUTATION, {"email": self.admin.email, "password": "nope-nope"})
        unknown = self.gql(LOGIN_MUTATION, {"email": "ghost@example.com", "password": PASSWORD})
        self.assertErrorCode(wrong, "INVALID_CREDENTIALS")
        self.assertErrorCode(unknown, "INVALID_CREDENTIALS")
        self.assertEqual(wrong["errors"][0]["message"], unknown["errors"][0]["message"])

    def test_login_with_empty_email(self) -> None:
        body = self.gql(LOGIN_MUTATION, {"email": "", "password": PASSWORD})
        self.assertErrorCode(body, "INVALID_CREDENTIALS")

    def test_services_run_off_the_event_loop(self) -> None:
        on_event_loop: list[bool] = []
        real_login = auth_service.login

        def recording_login(db, credentials):
            try:
                asyncio.get_running_loop()
                on_event_loop.append(True)
            except RuntimeError:
                on_event_loop.append(False)
            return real_login(db, credentials)

        with patch.object(auth_service, "login", recording_login):
            body = self.gql(LOGIN_MUTATION, {"email": self.admin.email, "password": PASSWORD})
        self.assertNotIn("errors", body, body)
        self.assertEqual(on_event_loop, [False])

    def test_login_ignores_stale_authorization_header(self) -> None:
        body = self.gql(
            LOGIN_MUTATION,
            {"email": self.admin.email, "password": PASSWORD},
            token="garbage",
        )
        self.assertNotIn("errors", body, body)

    def test_signup_then_list(self) -> None:
        body = self.gql(
            """
            mutation Signup($input: CreateUserInput!) {
              signup(input: $input) { token user { id role status } }
            }
            """,
            {"input": {"name": "Fresh User", "email": "fresh@example.com", "password": "hunter22", "role": "ADMIN"}},
        )
        self.assertNotIn("errors", body, body)
        payload = body["data"]["signup"]
        self.assertEqual(payload["user"]["role"], "USER")
        self.assertEqual(payload["user"]["status"], "ACTIVE")

        listed = self.gql(
            USERS_QUERY, {"page": 1, "limit": 5, "search": "fresh"}, token=payload["token"]
        )
        self.assertEqual(listed["data"]["users"]["totalCount"], 1)

    def test_signup_invalid_input(self) -> None:
        body = self.gql(
            """
            mutation { signup(input: {name: "X", email: "bad", password: "1"}) { token } }
            """
        )
        self.assertErrorCode(body, "BAD_USER_INPUT")


class TestUserQueries(GraphQLTestCase):
    def test_users_requires_token(self) -> None:
        body = self.gql(USERS_QUERY, {"page": 1, "limit": 10})
        self.assertErrorCode(body, "UNAUTHENTICATED")
        self.assertIsNone(body["data"])

    def test_users_rejects_invalid_token(self) -> None:
        body = self.gql(USERS_QUERY, {"page": 1, "limit": 10}, token="not.a.jwt")
        self.assertErrorCode(body, "UNAUTHENTICATED")

    def test_users_filtered_page(self) -> None:
        body = self.gql(
            USERS_QUERY,
            {"page": 1, "limit": 10, "role": "USER", "status": "ACTIVE"},
            token=self._token(self.member),
        )
        self.assertNotIn("errors", body, body)
        connection = body["data"]["users"]
        expected = sum(
            1 for u in self.users if u.role == UserRole.USER and u.status == UserStatus.ACTIVE
        )
        self.assertEqual(connection["totalCount"], expected)
        self.assertEqual(connection["totalPages"], -(-expected // 10))
        self.assertEqual(connection["currentPage"], 1)
        self.assertLessEqual(len(connection["users"]), 10)
        for user in connection["users"]:
            self.assertEqual((user["role"], user["status"]), ("USER", "ACTIVE"))
            self.assertTrue(user["createdAt"].endswith("Z"))
            self.assertNotIn("password", user)

    def test_users_bad_limit(self) -> None:
        body = self.gql(USERS_QUERY, {"page": 1, "limit": 0}, token=self._token(self.member))
        self.assertErrorCode(body, "BAD_USER_INPUT")

    def test_user_by_id_requires_admin(self) -> None:
        query = "query U($id: ID!) { user(id: $id) { id email } }"
        forbidden = self.gql(query, {"id": self.member.id}, token=self._token(self.member))
        self.assertErrorCode(forbidden, "FORBIDDEN")

        found = self.gql(query, {"id": self.member.id}, token=self._token(self.admin))
        self.assertEqual(found["data"]["user"]["email"], self.member.email)

        missing = self.gql(query, {"id": "missing"}, token=self._token(self.admin))
        self.assertErrorCode(missing, "NOT_FOUND")

    def test_export_users(self) -> None:
        body = self.gql(
            "query { exportUsers(role: ADMIN) { id role createdAt } }",
            token=self._token(self.member),
        )
        self.assertNotIn("errors", body, body)
        self.assertEqual(len(body["data"]["exportUsers"]), 5)


class TestUserMutations(GraphQLTestCase):
    CREATE = """
    mutation Create($input: CreateUserInput!) {
      createUser(input: $input) { id name email role status location }
    }
    """

    def test_create_requires_admin(self) -> None:
        body = self.gql(
            self.CREATE,
            {"input": {"name": "New One", "email": "new@example.com", "password": "hunter22"}},
            token=self._token(self.member),
        )
        self.assertErrorCode(body, "FORBIDDEN")

    def test_create_update_delete(self) -> None:
        token = self._token(self.admin)
        created = self.gql(
            self.CREATE,
            {"input": {"name": "New One", "email": "new@example.com", "password": "hunter22", "location": "Singapore"}},
            token=token,
        )
        self.assertNotIn("errors", created, created)
        user = created["data"]["createUser"]
        self.assertEqual((user["role"], user["status"]), ("USER", "ACTIVE"))

        duplicate = self.gql(
            self.CREATE,
            {"input": {"name": "New Two", "email": "new@example.com", "password": "hunter22"}},
            token=token,
        )
        self.assertErrorCode(duplicate, "DUPLICATE_EMAIL")

        updated = self.gql(
            """
            mutation Update($id: ID!, $input: UpdateUserInput!) {
              updateUser(id: $id, input: $input) { id name status location }
            }
            """,
            {"id": user["id"], "input": {"status": "INACTIVE", "location": None}},
            token=token,
        )
        self.assertNotIn("errors", updated, updated)
        self.assertEqual(updated["data"]["updateUser"]["name"], "New One")
        self.assertEqual(updated["data"]["updateUser"]["status"], "INACTIVE")
        self.assertIsNone(updated["data"]["updateUser"]["location"])

        deleted = self.gql(
            "mutation D($id: ID!) { deleteUser(id: $id) }", {"id": user["id"]}, token=token
        )
        self.assertTrue(deleted["data"]["deleteUser"])

        again = self.gql(
            "mutation D($id: ID!) { deleteUser(id: $id) }", {"id": user["id"]}, token=token
        )
        self.assertErrorCode(again, "NOT_FOUND")

    def test_update_null_name_rejected(self) -> None:
        body = self.gql(
            """
            mutation Update($id: ID!) { updateUser(id: $id, input: {name: null}) { id } }
            """,
            {"id": self.member.id},
            token=self._token(self.admin),
        )
        self.assertErrorCode(body, "BAD_USER_INPUT")

    def test_delete_multiple(self) -> None:
        token = self._token(self.admin)
        mutation = "mutation DM($ids: [ID!]!) { deleteMultipleUsers(ids: $ids) }"

        self.assertErrorCode(self.gql(mutation, {"ids": []}, token=token), "BAD_USER_INPUT")
        self.assertErrorCode(self.gql(mutation, {"ids": ["nope"]}, token=token), "NOT_FOUND")

        ids = [u.id for u in self.users[10:15]]
        body = self.gql(mutation, {"ids": ids}, token=token)
        self.assertTrue(body["data"]["deleteMultipleUsers"])

        lookup = "query U($id: ID!) { user(id: $id) { id } }"
        for user_id in ids:
            self.assertErrorCode(self.gql(lookup, {"id": user_id}, token=token), "NOT_FOUND")


class TestRestRoutes(GraphQLTestCase):
    def test_root(self) -> None:
        response = self.client.get("/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["graphql"], "/graphql")

    def test_health(self) -> None:
        response = self.client.get("/api/v1/health/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "ok")
        self.assertEqual(response.json()["database"], "connected")


class TestStartup(unittest.TestCase):
    """Application lifespan: database check and default admin seeding."""

    def test_unreachable_database_aborts_startup(self) -> None:
        failure = OperationalError("SELECT 1", {}, Exception("connection refused"))
        with (
            patch.object(main_module, "ping_engine", side_effect=failure),
            self.assertLogs("app.main", level="CRITICAL"),
            self.assertRaises(RuntimeError),
        ):
            with TestClient(app):
                pass

    def test_startup_seeds_default_admin(self) -> None:
        session_factory = make_session_factory()
        settings = MagicMock()
        settings.SEED_ADMIN_ON_STARTUP = True
        settings.DEFAULT_ADMIN_EMAIL = "boot-admin@example.com"
        settings.DEFAULT_ADMIN_PASSWORD = SecretStr("admin123")
        with (
            patch.object(main_module, "ping_engine"),
            patch.object(main_module, "SessionLocal", session_factory),
            patch.object(main_module, "settings", settings),
        ):
            with TestClient(app):
                pass

        db = session_factory()
        try:
            admin = db.query(User).filter(User.email == "boot-admin@example.com").one()
            self.assertEqual(admin.role, UserRole.ADMIN)
            self.assertEqual(admin.status, UserStatus.ACTIVE)
        finally:
            db.close()

    def test_startup_without_seeding_leaves_store_untouched(self) -> None:
        session_factory = make_session_factory()
        with (
            patch.object(main_module, "ping_engine"),
            patch.object(main_module, "SessionLocal", session_factory),
        ):
            with TestClient(app):
                pass
        db = session_factory()
        try:
            self.assertEqual(db.query(User).count(), 0)
        finally:
            db.close()


if __name__ == "__main__":
    unittest.main()
