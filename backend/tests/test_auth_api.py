import unittest
from types import SimpleNamespace
from unittest.mock import patch
from uuid import uuid4

from fastapi.testclient import TestClient

from watchlist.core.security import create_access_token
from watchlist.db.session import get_db
from watchlist.deps.auth import get_current_user
from watchlist.main import app
from watchlist.schemas.auth import AuthErrorKind
from watchlist.services.auth_service import AuthError


def _fake_user(**overrides):
    base = {"id": uuid4(), "email": "viewer@example.com", "is_active": True}
    base.update(overrides)
    return SimpleNamespace(**base)


class TestAuthApi(unittest.TestCase):
    def setUp(self) -> None:
        self.client = TestClient(app)
        app.dependency_overrides[get_db] = lambda: iter([object()])

    def tearDown(self) -> None:
        app.dependency_overrides.clear()

    def test_register_returns_session(self) -> None:
        user = _fake_user()
        with patch("watchlist.api.auth.register_user", return_value=user):
            response = self.client.post(
                "/auth/register",
                json={"email": "viewer@example.com", "password": "secret1"},
            )

        self.assertEqual(response.status_code, 201)
        payload = response.json()
        self.assertEqual(payload["token_type"], "bearer")
        self.assertEqual(payload["user"], {"id": str(user.id), "email": "viewer@example.com"})
        self.assertTrue(payload["access_token"])

    def test_register_email_in_use_is_409(self) -> None:
        with patch(
            "watchlist.api.auth.register_user",
            side_effect=AuthError(AuthErrorKind.EMAIL_IN_USE),
        ):
            response = self.client.post(
                "/auth/register",
                json={"email": "viewer@example.com", "password": "secret1"},
            )

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["detail"]["error"]["code"], "EMAIL_IN_USE")

    def test_register_weak_password_is_400(self) -> None:
        with patch(
            "watchlist.api.auth.register_user",
            side_effect=AuthError(AuthErrorKind.WEAK_PASSWORD),
        ):
            response = self.client.post(
                "/auth/register",
                json={"email": "viewer@example.com", "password": "1"},
            )
        self.assertEqual(response.status_code, 400)

    def test_login_failure_kinds(self) -> None:
        cases = {
            AuthErrorKind.USER_NOT_FOUND: 401,
            AuthErrorKind.WRONG_PASSWORD: 401,
            AuthErrorKind.RATE_LIMITED: 429,
            AuthErrorKind.INVALID_EMAIL: 400,
        }
        for kind, expected_status in cases.items():
            with self.subTest(kind=kind), patch(
                "watchlist.api.auth.authenticate_user",
                side_effect=AuthError(kind),
            ):
                response = self.client.post(
                    "/auth/login",
                    json={"email": "viewer@example.com", "password": "secret1"},
                )
                self.assertEqual(response.status_code, expected_status)
                self.assertEqual(response.json()["detail"]["error"]["code"], kind.value)

    def test_login_success(self) -> None:
        with patch("watchlist.api.auth.authenticate_user", return_value=_fake_user()):
            response = self.client.post(
                "/auth/login",
                json={"email": "viewer@example.com", "password": "secret1"},
            )
        self.assertEqual(response.status_code, 200)
        self.assertIn("access_token", response.json())

    def test_me_requires_token(self) -> None:
        self.assertEqual(self.client.get("/auth/me").status_code, 401)

    def test_me_rejects_forged_token(self) -> None:
        response = self.client.get("/auth/me", headers={"Authorization": "Bearer not.a.token"})
        self.assertEqual(response.status_code, 401)

    def test_me_resolves_token_owner(self) -> None:
        user = _fake_user()
        token = create_access_token(owner_id=user.id)
        with patch("watchlist.deps.auth.get_user_by_id", return_value=user) as lookup:
            response = self.client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["id"], str(user.id))
        self.assertEqual(lookup.call_args.args[1], user.id)

    def test_me_rejects_inactive_user(self) -> None:
        user = _fake_user(is_active=False)
        token = create_access_token(owner_id=user.id)
        with patch("watchlist.deps.auth.get_user_by_id", return_value=user):
            response = self.client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
        self.assertEqual(response.status_code, 401)

    def test_logout(self) -> None:
        app.dependency_overrides[get_current_user] = lambda: _fake_user()
        response = self.client.post("/auth/logout")
        self.assertEqual(response.status_code, 204)
