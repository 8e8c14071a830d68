import os

# Cấu hình phải có trước khi import app: config đọc biến môi trường lúc import
os.environ["JWT_SECRET"] = "test-secret-key-not-for-production"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["APP_ENV"] = "test"

import pytest
from fastapi.testclient import TestClient

from ..main import app
from ..core.database import Base, SessionLocal, engine
from ..user.models import User

DEFAULT_PASSWORD = "secret123"


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def client():
    return TestClient(app)


def auth_header(token):
    return {"Authorization": f"Bearer {token}"}


def register(client, username, password=DEFAULT_PASSWORD, **extra):
    """Register a user through the API and return (user dict, token)."""
    payload = {
        "username": username,
        "email": f"{username}@example.com",
        "password": password,
        "first_name": "Test",
        "last_name": "User",
    }
    payload.update(extra)
    response = client.post("/api/auth/register", json=payload)
    assert response.status_code == 201, response.text
    data = response.json()["data"]
    return data["user"], data["token"]


def set_role(username, role):
    with SessionLocal() as session:
        user = session.query(User).filter(User.username == username).one()
        user.role = role
        session.commit()


def load_user(username):
    with SessionLocal() as session:
        user = session.query(User).filter(User.username == username).one()
        session.expunge(user)
        return user


@pytest.fixture
def user_a(client):
    return register(client, "alice")


@pytest.fixture
def user_b(client):
    return register(client, "bobby")


@pytest.fixture
def admin(client):
    user, token = register(client, "admin")
    set_role("admin", "admin")
    return user, token


def create_place(client, token, name="Plaza Mayor", latitude=40.4155, longitude=-3.7074, **extra):
    payload = {
        "name": name,
        "address": "Calle Mayor 1, Madrid",
        "coordinates": {"latitude": latitude, "longitude": longitude},
        "description": f"{name} description",
        "price_range": "free",
    }
    payload.update(extra)
    response = client.post("/api/places", json=payload, headers=auth_header(token))
    assert response.status_code == 201, response.text
    return response.json()["data"]
