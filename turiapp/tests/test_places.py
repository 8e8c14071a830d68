from .conftest import auth_header, create_place, register


def _create_category(client, token, name, **extra):
    response = client.post("/api/categories", json={"name": name, **extra}, headers=auth_header(token))
    assert response.status_code == 201, response.text
    return response.json()["data"]


def test_create_place_sets_creator(client, user_a):
    user, token = user_a
    place = create_place(client, token)
    assert place["created_by"] == user["id"]
    assert place["latitude"] == 40.4155
    assert place["average_rating"] == 0


def test_only_owner_can_update_or_delete(client, user_a, user_b):
    _, token_a = user_a
    _, token_b = user_b
    place = create_place(client, token_a)

    response = client.put(f"/api/places/{place['id']}", json={"name": "Stolen"}, headers=auth_header(token_b))
    assert response.status_code == 403
    assert response.json()["error"] == "Unauthorized to update this place"

    response = client.delete(f"/api/places/{place['id']}", headers=auth_header(token_b))
    assert response.status_code == 403
    assert response.json()["error"] == "Unauthorized to delete this place"

    response = client.put(f"/api/places/{place['id']}", json={"name": "Plaza Renamed"}, headers=auth_header(token_a))
    assert response.status_code == 200
    assert response.json()["data"]["name"] == "Plaza Renamed"


def test_admin_can_update_any_place(client, user_a, admin):
    _, token_a = user_a
    _, admin_token = admin
    place = create_place(client, token_a)
    response = client.put(f"/api/places/{place['id']}", json={"price_range": "low"}, headers=auth_header(admin_token))
    assert response.status_code == 200
    assert response.json()["data"]["price_range"] == "low"


def test_update_replaces_category_set(client, user_a, admin):
    _, token_a = user_a
    _, admin_token = admin
    museums = _create_category(client, admin_token, "Museums")
    parks = _create_category(client, admin_token, "Parks")
    place = create_place(client, token_a, category_ids=[museums["id"]])
    assert [c["id"] for c in place["categories"]] == [museums["id"]]

    response = client.put(
        f"/api/places/{place['id']}", json={"category_ids": [parks["id"]]}, headers=auth_header(token_a)
    )
    assert response.status_code == 200
    assert [c["id"] for c in response.json()["data"]["categories"]] == [parks["id"]]

    response = client.get(f"/api/places/category/{parks['id']}")
    assert [p["id"] for p in response.json()["data"]] == [place["id"]]


def test_create_place_with_unknown_category(client, user_a):
    _, token = user_a
    response = client.post("/api/places", json={
        "name": "Ghost Place",
        "address": "Calle Falsa 123",
        "coordinates": {"lat": 10, "lng": 10},
        "category_ids": [999],
    }, headers=auth_header(token))
    assert response.status_code == 404


def test_create_place_requires_coordinates(client, user_a):
    _, token = user_a
    response = client.post("/api/places", json={"name": "No coords", "address": "Somewhere 12"}, headers=auth_header(token))
    assert response.status_code == 400
    assert response.json()["error"] == "Validation error"


def test_nearby_returns_only_places_within_radius(client, user_a):
    _, token = user_a
    near = create_place(client, token, name="Near", latitude=40.42, longitude=-3.70)
    create_place(client, token, name="Far", latitude=41.39, longitude=2.17)

    response = client.get("/api/places/nearby", params={"latitude": 40.4168, "longitude": -3.7038, "radius": 5})
    assert response.status_code == 200
    places = response.json()["data"]
    assert [p["id"] for p in places] == [near["id"]]
    assert 0 < places[0]["distance_km"] < 5


def test_nearby_orders_by_distance(client, user_a):
    _, token = user_a
    second = create_place(client, token, name="Second", latitude=40.45, longitude=-3.70)
    first = create_place(client, token, name="First", latitude=40.417, longitude=-3.704)
    response = client.get("/api/places/nearby", params={"latitude": 40.4168, "longitude": -3.7038, "radius": 50})
    assert [p["id"] for p in response.json()["data"]] == [first["id"], second["id"]]


def test_get_missing_place(client):
    response = client.get("/api/places/9999")
    assert response.status_code == 404
    assert response.json()["error"] == "Place not found"


def test_record_visit_and_stats(client, user_a):
    _, token = user_a
    place = create_place(client, token)
    client.post(f"/api/places/{place['id']}/visit")
    response = client.post(f"/api/places/{place['id']}/visit")
    assert response.json()["data"]["total_visits"] == 2

    stats = client.get(f"/api/places/{place['id']}/stats").json()["data"]
    assert stats["total_visits"] == 2
    assert stats["total_reviews"] == 0
    assert stats["total_favorites"] == 0


def test_search_and_price_filters(client, user_a):
    _, token = user_a
    cheap = create_place(client, token, name="Cheap Eats", price_range="low")
    create_place(client, token, name="Fancy Dinner", price_range="luxury")

    response = client.get("/api/places/search", params={"q": "cheap"})
    assert [p["id"] for p in response.json()["data"]] == [cheap["id"]]

    response = client.get("/api/places/price/low")
    assert [p["id"] for p in response.json()["data"]] == [cheap["id"]]

    response = client.get("/api/places/price/expensive")
    assert response.status_code == 400


def test_feature_requires_admin(client, user_a, admin):
    _, token_a = user_a
    _, admin_token = admin
    place = create_place(client, token_a)

    response = client.put(f"/api/places/{place['id']}/feature", json={"value": True}, headers=auth_header(token_a))
    assert response.status_code == 403
    assert response.json()["error"] == "Acceso denegado"

    response = client.put(f"/api/places/{place['id']}/feature", json={"value": True}, headers=auth_header(admin_token))
    assert response.status_code == 200
    featured = client.get("/api/places/featured").json()["data"]
    assert [p["id"] for p in featured] == [place["id"]]


def test_owner_deletes_place(client, user_a):
    _, token = user_a
    place = create_place(client, token)
    response = client.delete(f"/api/places/{place['id']}", headers=auth_header(token))
    assert response.status_code == 200
    assert client.get(f"/api/places/{place['id']}").status_code == 404


def test_second_user_sees_places_list(client, user_a):
    _, token = user_a
    create_place(client, token, name="One")
    create_place(client, token, name="Two")
    register(client, "viewer")
    response = client.get("/api/places", params={"limit": 1})
    assert len(response.json()["data"]) == 1


def test_update_rejects_null_for_required_fields(client, user_a):
    _, token = user_a
    place = create_place(client, token)
    for field in ("name", "address", "price_range", "coordinates"):
        response = client.put(f"/api/places/{place['id']}", json={field: None}, headers=auth_header(token))
        assert response.status_code == 400
        assert response.json()["error"] == "Validation error"
    assert client.get(f"/api/places/{place['id']}").json()["data"]["name"] == "Plaza Mayor"


def test_nearby_across_the_antimeridian(client, user_a):
    _, token = user_a
    fiji_east = create_place(client, token, name="Taveuni Point", latitude=-16.8, longitude=179.95)
    create_place(client, token, name="Far Away", latitude=-16.8, longitude=170.0)

    response = client.get("/api/places/nearby", params={"latitude": -16.8, "longitude": -179.95, "radius": 20})
    places = response.json()["data"]
    assert [p["id"] for p in places] == [fiji_east["id"]]
    assert places[0]["distance_km"] < 20
