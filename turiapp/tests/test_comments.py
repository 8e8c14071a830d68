import pytest

from .conftest import auth_header, create_place, register, set_role


@pytest.fixture
def review(client, user_a):
    _, token_a = user_a
    place = create_place(client, token_a)
    response = client.post(
        "/api/reviews",
        json={"place_id": place["id"], "rating": 4, "content": "Lovely square with great views"},
        headers=auth_header(token_a),
    )
    assert response.status_code == 201
    return response.json()["data"]


def _comment(client, token, review_id, content="Totally agree", parent_id=None):
    payload = {"review_id": review_id, "content": content}
    if parent_id is not None:
        payload["parent_id"] = parent_id
    return client.post("/api/comments", json=payload, headers=auth_header(token))


def test_one_top_level_comment_per_user(client, user_a, user_b, review):
    _, token_b = user_b
    first = _comment(client, token_b, review["id"])
    assert first.status_code == 201
    assert first.json()["data"]["user"]["username"] == "bobby"

    second = _comment(client, token_b, review["id"], content="One more thing")
    assert second.status_code == 403
    assert second.json()["error"] == "User cannot comment on this review"

    response = client.get(f"/api/comments/review/{review['id']}/can-comment", headers=auth_header(token_b))
    assert response.json()["data"]["canComment"] is False


def test_review_author_cannot_comment_top_level(client, user_a, review):
    _, token_a = user_a
    response = _comment(client, token_a, review["id"])
    assert response.status_code == 403
    assert response.json()["error"] == "User cannot comment on this review"


def test_blank_comment_is_rejected(client, user_b, review):
    _, token_b = user_b
    response = _comment(client, token_b, review["id"], content="   ")
    assert response.status_code == 400
    assert response.json()["error"] == "Comment content cannot be empty"


def test_reply_needs_parent_on_same_review(client, user_b, review):
    _, token_b = user_b
    response = _comment(client, token_b, review["id"], parent_id=999)
    assert response.status_code == 404
    assert response.json()["error"] == "Parent comment not found"


def test_thread_returns_all_descendants_with_levels(client, user_a, user_b, review):
    _, token_a = user_a
    _, token_b = user_b
    _, token_c = register(client, "carol")

    root = _comment(client, token_b, review["id"]).json()["data"]
    reply = _comment(client, token_a, review["id"], "Thanks!", parent_id=root["id"]).json()["data"]
    nested = _comment(client, token_c, review["id"], "Me too", parent_id=reply["id"]).json()["data"]
    sibling = _comment(client, token_c, review["id"], "Same here", parent_id=root["id"]).json()["data"]

    response = client.get(f"/api/comments/{root['id']}/thread")
    assert response.status_code == 200
    thread = response.json()["data"]
    levels = {item["id"]: item["level"] for item in thread}
    assert levels == {root["id"]: 0, reply["id"]: 1, sibling["id"]: 1, nested["id"]: 2}
    assert [item["level"] for item in thread] == sorted(item["level"] for item in thread)

    response = client.get(f"/api/comments/{reply['id']}/thread")
    assert [item["id"] for item in response.json()["data"]] == [reply["id"], nested["id"]]


def test_thread_of_missing_comment(client):
    response = client.get("/api/comments/12345/thread")
    assert response.status_code == 404


def test_comments_with_replies(client, user_a, user_b, review):
    _, token_a = user_a
    _, token_b = user_b
    root = _comment(client, token_b, review["id"]).json()["data"]
    _comment(client, token_a, review["id"], "Thanks!", parent_id=root["id"])

    data = client.get(f"/api/comments/review/{review['id']}/with-replies").json()["data"]
    assert len(data) == 1
    assert len(data[0]["replies"]) == 1
    assert client.get(f"/api/comments/review/{review['id']}/count").json()["data"]["count"] == 2


def test_only_author_updates_comment(client, user_a, user_b, review):
    _, token_a = user_a
    _, token_b = user_b
    comment = _comment(client, token_b, review["id"]).json()["data"]

    response = client.put(f"/api/comments/{comment['id']}", json={"content": "edited"}, headers=auth_header(token_a))
    assert response.status_code == 404
    assert response.json()["error"] == "Comment not found or unauthorized to update"

    response = client.put(f"/api/comments/{comment['id']}", json={"content": "edited"}, headers=auth_header(token_b))
    assert response.status_code == 200
    assert response.json()["data"]["content"] == "edited"


def test_moderation(client, user_b, review):
    _, token_b = user_b
    _, mod_token = register(client, "moddy")
    set_role("moddy", "moderator")
    comment = _comment(client, token_b, review["id"]).json()["data"]

    response = client.post(f"/api/comments/{comment['id']}/moderate", json={"action": "ban"}, headers=auth_header(token_b))
    assert response.status_code == 403

    response = client.post(f"/api/comments/{comment['id']}/moderate", json={"action": "ban"}, headers=auth_header(mod_token))
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid moderation action"

    response = client.post(f"/api/comments/{comment['id']}/moderate", json={"action": "hide"}, headers=auth_header(mod_token))
    assert response.status_code == 200
    assert client.get(f"/api/comments/review/{review['id']}").json()["data"] == []

    response = client.post(f"/api/comments/{comment['id']}/moderate", json={"action": "delete"}, headers=auth_header(mod_token))
    assert response.status_code == 200
    assert client.get(f"/api/comments/{comment['id']}").status_code == 404
