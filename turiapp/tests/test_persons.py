from .conftest import auth_header, create_place


def _profile(client, token, **extra):
    payload = {
        "bio": "Backpacker and amateur photographer",
        "nationality": "Spanish",
        "location_country": "Spain",
        "location_city": "Madrid",
        "interests": ["Hiking"],
        "languages": ["Spanish", "English"],
    }
    payload.update(extra)
    return client.post("/api/persons", json=payload, headers=auth_header(token))


def test_create_profile_once(client, user_a):
    user, token = user_a
    response = _profile(client, token, coordinates={"latitude": 40.4, "longitude": -3.7})
    assert response.status_code == 201
    data = response.json()["data"]
    assert data["user_id"] == user["id"]
    assert data["latitude"] == 40.4
    assert data["user"]["username"] == "alice"

    response = _profile(client, token)
    assert response.status_code == 409
    assert response.json()["error"] == "Person profile already exists for this user"


def test_birth_date_in_future_is_rejected(client, user_a):
    _, token = user_a
    response = _profile(client, token, birth_date="2999-01-01")
    assert response.status_code == 400


def test_my_profile(client, user_a):
    _, token = user_a
    response = client.get("/api/persons/me", headers=auth_header(token))
    assert response.status_code == 404
    assert response.json()["error"] == "Person profile not found"

    _profile(client, token)
    response = client.put("/api/persons/me", json={"location_city": "Sevilla"}, headers=auth_header(token))
    assert response.status_code == 200
    me = client.get("/api/persons/me", headers=auth_header(token)).json()["data"]
    assert me["location_city"] == "Sevilla"
    assert me["nationality"] == "Spanish"


def test_interest_add_is_idempotent(client, user_a):
    _, token = user_a
    _profile(client, token)

    for value in ("Food", "food"):
        response = client.post("/api/persons/me/interests", json={"value": value}, headers=auth_header(token))
        assert response.status_code == 200
    assert response.json()["data"]["interests"] == ["Hiking", "Food"]

    response = client.request("DELETE", "/api/persons/me/interests", json={"value": "HIKING"}, headers=auth_header(token))
    assert response.json()["data"]["interests"] == ["Food"]

    response = client.post("/api/persons/me/languages", json={"value": "French"}, headers=auth_header(token))
    assert response.json()["data"]["languages"] == ["Spanish", "English", "French"]


def test_profiles_by_interest_and_language(client, user_a, user_b):
    _, token_a = user_a
    _, token_b = user_b
    _profile(client, token_a)
    _profile(client, token_b, interests=["Museums"], languages=["German"])

    found = client.get("/api/persons/interest/hiking").json()["data"]
    assert [p["user"]["username"] for p in found] == ["alice"]
    found = client.get("/api/persons/language/German").json()["data"]
    assert [p["user"]["username"] for p in found] == ["bobby"]


def test_private_profile_visibility(client, user_a, user_b, admin):
    user, token_a = user_a
    _, token_b = user_b
    _, admin_token = admin
    _profile(client, token_a, is_public=False)

    url = f"/api/persons/user/{user['id']}"
    assert client.get(url).status_code == 404
    assert client.get(url, headers=auth_header(token_b)).status_code == 404
    assert client.get(url, headers=auth_header(token_a)).status_code == 200
    assert client.get(url, headers=auth_header(admin_token)).status_code == 200
    assert client.get("/api/persons/public").json()["data"] == []

    response = client.put("/api/persons/me/visibility", json={"is_public": True}, headers=auth_header(token_a))
    assert response.json()["data"]["is_public"] is True
    assert client.get(url).status_code == 200
    assert len(client.get("/api/persons/public").json()["data"]) == 1


def test_location_and_search(client, user_a, user_b):
    _, token_a = user_a
    _, token_b = user_b
    _profile(client, token_a)
    _profile(client, token_b, location_country="Portugal", location_city="Lisboa", nationality="Portuguese")

    found = client.get("/api/persons/location", params={"country": "spain"}).json()["data"]
    assert [p["user"]["username"] for p in found] == ["alice"]
    found = client.get("/api/persons/location", params={"country": "Portugal", "city": "Porto"}).json()["data"]
    assert found == []

    found = client.get("/api/persons/search", params={"q": "lisboa"}).json()["data"]
    assert [p["user"]["username"] for p in found] == ["bobby"]

    stats = client.get("/api/persons/stats").json()["data"]
    assert stats["total_profiles"] == 2
    assert stats["countries"] == 2


def test_popular_profiles_count_reviews(client, user_a, user_b):
    _, token_a = user_a
    _, token_b = user_b
    _profile(client, token_a)
    _profile(client, token_b)
    place = create_place(client, token_a)
    client.post(
        "/api/reviews",
        json={"place_id": place["id"], "rating": 5, "content": "Great atmosphere at night"},
        headers=auth_header(token_b),
    )

    popular = client.get("/api/persons/popular").json()["data"]
    assert popular[0]["profile"]["user"]["username"] == "bobby"
    assert popular[0]["review_count"] == 1
