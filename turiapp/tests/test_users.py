from .conftest import auth_header, create_place


def test_listing_users_requires_admin(client, user_a, admin):
    _, token_a = user_a
    _, admin_token = admin

    response = client.get("/api/users", headers=auth_header(token_a))
    assert response.status_code == 403
    assert response.json()["error"] == "Acceso denegado"

    response = client.get("/api/users", headers=auth_header(admin_token))
    assert response.status_code == 200
    assert {u["username"] for u in response.json()["data"]} == {"alice", "admin"}

    response = client.get("/api/users", params={"role": "admin"}, headers=auth_header(admin_token))
    assert [u["username"] for u in response.json()["data"]] == ["admin"]


def test_user_list_requires_token(client):
    response = client.get("/api/users/active")
    assert response.status_code == 401
    assert response.json()["error"] == "Token de acceso requerido"


def test_stats_are_visible_to_self_and_admin_only(client, user_a, user_b, admin):
    user, token_a = user_a
    _, token_b = user_b
    _, admin_token = admin
    place = create_place(client, token_a)
    client.post("/api/favorites", json={"place_id": place["id"]}, headers=auth_header(token_a))

    response = client.get(f"/api/users/{user['id']}/stats", headers=auth_header(token_a))
    assert response.status_code == 200
    stats = response.json()["data"]
    assert stats["user_id"] == user["id"]
    assert stats["total_favorites"] == 1
    assert stats["total_reviews"] == 0

    response = client.get(f"/api/users/{user['id']}/stats", headers=auth_header(token_b))
    assert response.status_code == 403

    response = client.get(f"/api/users/{user['id']}/stats", headers=auth_header(admin_token))
    assert response.status_code == 200


def test_dashboard(client, user_a):
    user, token = user_a
    place = create_place(client, token)
    client.post(
        "/api/reviews",
        json={"place_id": place["id"], "rating": 4, "content": "Good spot for a coffee break"},
        headers=auth_header(token),
    )
    client.post("/api/favorites", json={"place_id": place["id"]}, headers=auth_header(token))

    data = client.get(f"/api/users/{user['id']}/dashboard", headers=auth_header(token)).json()["data"]
    assert data["user"]["username"] == "alice"
    assert data["stats"]["total_reviews"] == 1
    assert len(data["recent_reviews"]) == 1
    assert data["recent_favorites"][0]["place_id"] == place["id"]


def test_admin_create_user_conflicts(client, user_a, admin):
    _, admin_token = admin
    payload = {
        "username": "charlie",
        "email": "alice@example.com",
        "password": "secret123",
        "first_name": "Charlie",
        "last_name": "Brown",
    }
    response = client.post("/api/users", json=payload, headers=auth_header(admin_token))
    assert response.status_code == 409
    assert response.json()["error"] == "User with this email already exists"

    payload["email"] = "charlie@example.com"
    response = client.post("/api/users", json=payload, headers=auth_header(admin_token))
    assert response.status_code == 201
    assert response.json()["data"]["role"] == "user"
    assert "password" not in response.json()["data"]
    assert "password_hash" not in response.json()["data"]


def test_update_user_checks_uniqueness(client, user_a, user_b):
    user, token_a = user_a
    response = client.put(f"/api/users/{user['id']}", json={"username": "bobby"}, headers=auth_header(token_a))
    assert response.status_code == 409
    assert response.json()["error"] == "User with this username already exists"

    response = client.put(f"/api/users/{user['id']}", json={"first_name": "Alicia"}, headers=auth_header(token_a))
    assert response.status_code == 200
    assert response.json()["data"]["first_name"] == "Alicia"


def test_deactivated_user_token_is_rejected(client, user_a, admin):
    user, token_a = user_a
    _, admin_token = admin
    assert client.get("/api/auth/me", headers=auth_header(token_a)).status_code == 200

    response = client.put(f"/api/users/{user['id']}/deactivate", headers=auth_header(admin_token))
    assert response.status_code == 200
    assert response.json()["data"]["is_active"] is False

    response = client.get("/api/auth/me", headers=auth_header(token_a))
    assert response.status_code == 401
    assert response.json()["error"] == "Token inválido"

    client.put(f"/api/users/{user['id']}/activate", headers=auth_header(admin_token))
    assert client.get("/api/auth/me", headers=auth_header(token_a)).status_code == 200


def test_change_role(client, user_a, admin):
    user, _ = user_a
    _, admin_token = admin

    response = client.put(f"/api/users/{user['id']}/role", json={"role": "moderator"}, headers=auth_header(admin_token))
    assert response.status_code == 200
    assert response.json()["data"]["role"] == "moderator"

    response = client.put(f"/api/users/{user['id']}/role", json={"role": "owner"}, headers=auth_header(admin_token))
    assert response.status_code == 400

    response = client.get("/api/users/role/superuser", headers=auth_header(admin_token))
    assert response.status_code == 400


def test_lookup_by_username_and_missing_user(client, user_a):
    _, token = user_a
    response = client.get("/api/users/username/alice", headers=auth_header(token))
    assert response.json()["data"]["email"] == "alice@example.com"

    response = client.get("/api/users/4040", headers=auth_header(token))
    assert response.status_code == 404
    assert response.json()["error"] == "User not found"


def test_admin_deletes_user(client, user_a, admin):
    user, _ = user_a
    _, admin_token = admin
    response = client.delete(f"/api/users/{user['id']}", headers=auth_header(admin_token))
    assert response.status_code == 200
    response = client.get(f"/api/users/{user['id']}", headers=auth_header(admin_token))
    assert response.status_code == 404
