from .conftest import auth_header, create_place, register


def _review(client, token, place_id, rating=5, content="Wonderful place to spend the afternoon"):
    return client.post(
        "/api/reviews",
        json={"place_id": place_id, "rating": rating, "title": "Great visit", "content": content},
        headers=auth_header(token),
    )


def test_create_review_updates_place_aggregates(client, user_a, user_b):
    _, token_a = user_a
    _, token_b = user_b
    place = create_place(client, token_a)

    assert _review(client, token_a, place["id"], rating=5).status_code == 201
    assert _review(client, token_b, place["id"], rating=2).status_code == 201

    data = client.get(f"/api/places/{place['id']}").json()["data"]
    assert data["total_reviews"] == 2
    assert data["average_rating"] == 3.5

    stats = client.get(f"/api/reviews/place/{place['id']}/stats").json()["data"]
    assert stats["five_star"] == 1
    assert stats["two_star"] == 1
    assert stats["one_star"] == 0


def test_second_review_of_same_place_is_rejected(client, user_a):
    _, token = user_a
    place = create_place(client, token)
    assert _review(client, token, place["id"]).status_code == 201

    response = _review(client, token, place["id"], rating=1)
    assert response.status_code == 409
    assert response.json()["error"] == "User has already reviewed this place"

    reviews = client.get(f"/api/reviews/place/{place['id']}").json()["data"]
    assert len(reviews) == 1

    response = client.get(f"/api/reviews/place/{place['id']}/can-review", headers=auth_header(token))
    assert response.json()["data"]["canReview"] is False


def test_rating_out_of_range(client, user_a):
    _, token = user_a
    place = create_place(client, token)
    response = _review(client, token, place["id"], rating=6)
    assert response.status_code == 400
    assert response.json()["error"] == "Validation error"


def test_review_of_missing_place(client, user_a):
    _, token = user_a
    response = _review(client, token, 4242)
    assert response.status_code == 404
    assert response.json()["error"] == "Place not found"


def test_only_author_updates_review(client, user_a, user_b):
    _, token_a = user_a
    _, token_b = user_b
    place = create_place(client, token_a)
    review = _review(client, token_a, place["id"], rating=4).json()["data"]

    response = client.put(f"/api/reviews/{review['id']}", json={"rating": 1}, headers=auth_header(token_b))
    assert response.status_code == 404
    assert response.json()["error"] == "Review not found or unauthorized to update"

    response = client.put(f"/api/reviews/{review['id']}", json={"rating": 2}, headers=auth_header(token_a))
    assert response.status_code == 200
    assert client.get(f"/api/places/{place['id']}").json()["data"]["average_rating"] == 2


def test_delete_review_recomputes_aggregates(client, user_a):
    _, token = user_a
    place = create_place(client, token)
    review = _review(client, token, place["id"]).json()["data"]

    response = client.delete(f"/api/reviews/{review['id']}", headers=auth_header(token))
    assert response.status_code == 200
    data = client.get(f"/api/places/{place['id']}").json()["data"]
    assert data["total_reviews"] == 0
    assert data["average_rating"] == 0


def test_helpful_votes_are_counted_once(client, user_a, user_b):
    _, token_a = user_a
    _, token_b = user_b
    place = create_place(client, token_a)
    review = _review(client, token_a, place["id"]).json()["data"]

    response = client.post(f"/api/reviews/{review['id']}/helpful", headers=auth_header(token_b))
    assert response.status_code == 200

    response = client.post(f"/api/reviews/{review['id']}/helpful", headers=auth_header(token_b))
    assert response.status_code == 409
    assert response.json()["error"] == "User has already marked this review as helpful"

    response = client.get(f"/api/reviews/{review['id']}/helpful/check", headers=auth_header(token_b))
    assert response.json()["data"]["hasMarked"] is True

    stats = client.get("/api/reviews/my/stats", headers=auth_header(token_a)).json()["data"]
    assert stats["total_helpful_received"] == 1


def test_review_listings(client, user_a):
    _, token = user_a
    place = create_place(client, token)
    _review(client, token, place["id"], rating=4, content="Nice fountain and quiet benches")

    top = client.get("/api/reviews/top-rated").json()["data"]
    assert len(top) == 1
    assert client.get("/api/reviews/rating/4").json()["data"][0]["rating"] == 4
    assert client.get("/api/reviews/rating/3").json()["data"] == []
    found = client.get("/api/reviews/search", params={"q": "fountain"}).json()["data"]
    assert len(found) == 1
    mine = client.get("/api/reviews/my", headers=auth_header(token)).json()["data"]
    assert mine[0]["place_id"] == place["id"]


def test_review_detail_includes_comment_count(client, user_a):
    _, token_a = user_a
    _, token_c = register(client, "carol")
    place = create_place(client, token_a)
    review = _review(client, token_a, place["id"]).json()["data"]
    client.post("/api/comments", json={"review_id": review["id"], "content": "Agreed!"}, headers=auth_header(token_c))

    detail = client.get(f"/api/reviews/{review['id']}").json()["data"]
    assert detail["comments_count"] == 1
