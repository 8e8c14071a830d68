from datetime import timedelta

import pytest
from httpx import ASGITransport, AsyncClient

from ..main import app
from ..core.database import SessionLocal
from ..core.security import create_access_token, create_password_reset_token, decode_token
from ..user.models import User
from .conftest import DEFAULT_PASSWORD, auth_header, load_user, register


def _user_count():
    with SessionLocal() as session:
        return session.query(User).count()


def test_register_returns_token_and_public_user(client):
    user, token = register(client, "alice")
    assert user["username"] == "alice"
    assert user["role"] == "user"
    assert user["is_verified"] is False
    assert "password_hash" not in user
    assert decode_token(token)["userId"] == user["id"]


def test_register_ignores_requested_role(client):
    user, _ = register(client, "mallory", role="admin")
    assert user["role"] == "user"


def test_register_duplicate_email_is_conflict(client, user_a):
    before = _user_count()
    response = client.post("/api/auth/register", json={
        "username": "another",
        "email": "ALICE@example.com",
        "password": DEFAULT_PASSWORD,
        "first_name": "Ann",
        "last_name": "Other",
    })
    assert response.status_code == 409
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "El email ya está registrado"
    assert _user_count() == before


def test_register_duplicate_username_is_conflict(client, user_a):
    before = _user_count()
    response = client.post("/api/auth/register", json={
        "username": "alice",
        "email": "different@example.com",
        "password": DEFAULT_PASSWORD,
        "first_name": "Ann",
        "last_name": "Other",
    })
    assert response.status_code == 409
    assert response.json()["error"] == "El nombre de usuario ya está en uso"
    assert _user_count() == before


def test_register_validation_error_lists_details(client):
    response = client.post("/api/auth/register", json={"username": "al", "email": "not-an-email"})
    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Validation error"
    assert body["details"]


def test_login_wrong_password_keeps_last_login(client, user_a):
    response = client.post("/api/auth/login", json={"identifier": "alice", "password": "wrong-password"})
    assert response.status_code == 401
    assert response.json()["error"] == "Credenciales inválidas"
    assert load_user("alice").last_login is None


def test_login_unknown_user(client):
    response = client.post("/api/auth/login", json={"identifier": "nobody", "password": DEFAULT_PASSWORD})
    assert response.status_code == 401
    assert response.json()["error"] == "Credenciales inválidas"


def test_login_updates_last_login_and_token_carries_user_id(client, user_a):
    user, _ = user_a
    response = client.post("/api/auth/login", json={"email": "alice@example.com", "password": DEFAULT_PASSWORD})
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["expiresIn"] == "24h"
    payload = decode_token(data["token"])
    assert payload["userId"] == user["id"]
    assert payload["username"] == "alice"
    assert load_user("alice").last_login is not None


def test_login_inactive_user(client, user_a):
    with SessionLocal() as session:
        session.query(User).filter(User.username == "alice").update({"is_active": False})
        session.commit()
    response = client.post("/api/auth/login", json={"identifier": "alice", "password": DEFAULT_PASSWORD})
    assert response.status_code == 401
    assert response.json()["error"] == "Usuario inactivo"


def test_protected_route_without_token(client):
    response = client.get("/api/auth/me")
    assert response.status_code == 401
    assert response.json()["error"] == "Token de acceso requerido"


def test_create_place_without_token_is_unauthorized(client):
    response = client.post("/api/places", json={
        "name": "Nowhere",
        "address": "Unknown street 1",
        "coordinates": {"latitude": 1, "longitude": 1},
    })
    assert response.status_code == 401


def test_invalid_and_expired_tokens(client, user_a):
    response = client.get("/api/auth/me", headers=auth_header("not-a-jwt"))
    assert response.status_code == 401
    assert response.json()["error"] == "Token inválido"

    expired = create_access_token(load_user("alice"), expires_delta=timedelta(seconds=-10))
    response = client.get("/api/auth/me", headers=auth_header(expired))
    assert response.status_code == 401
    assert response.json()["error"] == "Token expirado"


def test_me_and_verify(client, user_a):
    user, token = user_a
    response = client.get("/api/auth/me", headers=auth_header(token))
    assert response.status_code == 200
    assert response.json()["data"]["id"] == user["id"]

    response = client.get("/api/auth/verify", headers=auth_header(token))
    assert response.status_code == 200
    assert response.json()["data"]["valid"] is True


def test_change_password(client, user_a):
    _, token = user_a
    response = client.post(
        "/api/auth/change-password",
        json={"currentPassword": "wrong-one", "newPassword": "newsecret"},
        headers=auth_header(token),
    )
    assert response.status_code == 400
    assert response.json()["error"] == "Contraseña actual incorrecta"

    response = client.post(
        "/api/auth/change-password",
        json={"currentPassword": DEFAULT_PASSWORD, "newPassword": "newsecret"},
        headers=auth_header(token),
    )
    assert response.status_code == 200
    assert response.json()["message"] == "Contraseña actualizada correctamente"

    response = client.post("/api/auth/login", json={"identifier": "alice", "password": "newsecret"})
    assert response.status_code == 200


def test_forgot_password_same_message_for_unknown_email(client, user_a):
    known = client.post("/api/auth/forgot-password", json={"email": "alice@example.com"})
    unknown = client.post("/api/auth/forgot-password", json={"email": "ghost@example.com"})
    assert known.status_code == unknown.status_code == 200
    assert known.json()["message"] == unknown.json()["message"]


def test_reset_password(client, user_a):
    user, token = user_a
    response = client.post("/api/auth/reset-password", json={"token": token, "newPassword": "resetpass"})
    assert response.status_code == 400
    assert response.json()["error"] == "Token inválido o expirado"

    reset_token = create_password_reset_token(user["id"])
    response = client.post("/api/auth/reset-password", json={"token": reset_token, "newPassword": "resetpass"})
    assert response.status_code == 200

    response = client.post("/api/auth/login", json={"identifier": "alice", "password": "resetpass"})
    assert response.status_code == 200


def test_reset_token_is_not_a_session_token(client, user_a):
    user, _ = user_a
    reset_token = create_password_reset_token(user["id"])

    response = client.get("/api/auth/me", headers=auth_header(reset_token))
    assert response.status_code == 401
    assert response.json()["error"] == "Token inválido"

    response = client.get("/api/auth/verify", headers=auth_header(reset_token))
    assert response.status_code == 401


def test_unknown_route_uses_envelope(client):
    response = client.get("/api/does-not-exist")
    assert response.status_code == 404
    assert response.json()["error"] == "Route not found"


def test_request_id_header(client):
    response = client.get("/health", headers={"X-Request-ID": "abc123"})
    assert response.headers["X-Request-ID"] == "abc123"


@pytest.mark.asyncio
async def test_health_check_async():
    """Health endpoint through an async client"""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "TuriApp API is running"
    assert "timestamp" in body
