from .conftest import auth_header, create_place


def test_add_favorite_twice_keeps_one_row(client, user_a):
    _, token = user_a
    place = create_place(client, token)

    response = client.post("/api/favorites", json={"place_id": place["id"]}, headers=auth_header(token))
    assert response.status_code == 201
    assert response.json()["data"]["place"]["id"] == place["id"]

    response = client.post("/api/favorites", json={"place_id": place["id"]}, headers=auth_header(token))
    assert response.status_code == 409
    assert response.json()["error"] == "Place is already in favorites"

    count = client.get("/api/favorites/my/count", headers=auth_header(token)).json()["data"]["count"]
    assert count == 1


def test_favorite_unknown_place(client, user_a):
    _, token = user_a
    response = client.post("/api/favorites", json={"place_id": 31337}, headers=auth_header(token))
    assert response.status_code == 404
    assert response.json()["error"] == "Place not found"


def test_toggle_alternates(client, user_a):
    _, token = user_a
    place = create_place(client, token)
    url = f"/api/favorites/place/{place['id']}/toggle"

    first = client.post(url, headers=auth_header(token)).json()["data"]
    assert first == {"isFavorite": True, "action": "added"}
    second = client.post(url, headers=auth_header(token)).json()["data"]
    assert second == {"isFavorite": False, "action": "removed"}
    third = client.post(url, headers=auth_header(token)).json()["data"]
    assert third["isFavorite"] is True

    check = client.get(f"/api/favorites/place/{place['id']}/check", headers=auth_header(token)).json()["data"]
    assert check["isFavorite"] is True


def test_remove_missing_favorite(client, user_a):
    _, token = user_a
    place = create_place(client, token)
    response = client.delete(f"/api/favorites/place/{place['id']}", headers=auth_header(token))
    assert response.status_code == 404
    assert response.json()["error"] == "Favorite not found"


def test_bulk_add_reports_each_item(client, user_a):
    _, token = user_a
    p1 = create_place(client, token, name="Place One")
    p2 = create_place(client, token, name="Place Two")

    response = client.post(
        "/api/favorites/bulk",
        json={"place_ids": [p1["id"], p2["id"], p2["id"], 999999]},
        headers=auth_header(token),
    )
    assert response.status_code == 200
    result = response.json()["data"]
    assert result["total"] == 4
    assert result["successful"] == 2
    assert result["failed"] == 2
    statuses = [item["status"] for item in result["results"]]
    assert statuses == ["fulfilled", "fulfilled", "rejected", "rejected"]
    assert result["results"][2]["reason"] == "Place is already in favorites"
    assert result["results"][3]["reason"] == "Place not found"

    count = client.get("/api/favorites/my/count", headers=auth_header(token)).json()["data"]["count"]
    assert count == 2


def test_bulk_remove(client, user_a):
    _, token = user_a
    p1 = create_place(client, token, name="Place One")
    client.post("/api/favorites", json={"place_id": p1["id"]}, headers=auth_header(token))

    response = client.request(
        "DELETE", "/api/favorites/bulk", json={"place_ids": [p1["id"], p1["id"]]}, headers=auth_header(token)
    )
    result = response.json()["data"]
    assert result["successful"] == 1
    assert result["results"][1]["reason"] == "Favorite not found"


def test_bulk_limits(client, user_a):
    _, token = user_a
    response = client.post("/api/favorites/bulk", json={"place_ids": []}, headers=auth_header(token))
    assert response.status_code == 400
    assert response.json()["error"] == "Place IDs array is required"

    response = client.post("/api/favorites/bulk", json={"place_ids": list(range(1, 52))}, headers=auth_header(token))
    assert response.status_code == 400


def test_favorite_stats_and_most_favorited(client, user_a, user_b):
    _, token_a = user_a
    _, token_b = user_b
    popular = create_place(client, token_a, name="Popular", price_range="low")
    other = create_place(client, token_a, name="Other", price_range="high")
    for token in (token_a, token_b):
        client.post("/api/favorites", json={"place_id": popular["id"]}, headers=auth_header(token))
    client.post("/api/favorites", json={"place_id": other["id"]}, headers=auth_header(token_a))

    most = client.get("/api/favorites/most-favorited").json()["data"]
    assert most[0]["id"] == popular["id"]

    fans = client.get(f"/api/favorites/place/{popular['id']}").json()["data"]
    assert {fan["username"] for fan in fans} == {"alice", "bobby"}

    summary = client.get("/api/favorites/my/summary", headers=auth_header(token_a)).json()["data"]
    assert summary["total"] == 2
    assert len(summary["recent"]) == 2
