from .conftest import auth_header, create_place


def _create(client, token, name, **extra):
    return client.post("/api/categories", json={"name": name, **extra}, headers=auth_header(token))


def test_only_admin_creates_categories(client, user_a, admin):
    _, token_a = user_a
    _, admin_token = admin

    response = _create(client, token_a, "Museums")
    assert response.status_code == 403
    assert response.json()["error"] == "Acceso denegado"

    response = _create(client, admin_token, "Museums", color_code="#FF0000")
    assert response.status_code == 201
    assert response.json()["data"]["is_active"] is True


def test_duplicate_category_name(client, admin):
    _, token = admin
    assert _create(client, token, "Beaches").status_code == 201
    response = _create(client, token, "beaches")
    assert response.status_code == 409
    assert response.json()["error"] == "Category with this name already exists"


def test_delete_blocked_by_subcategory_then_soft_deletes(client, admin):
    _, token = admin
    parent = _create(client, token, "Nature").json()["data"]
    response = client.post(
        f"/api/categories/{parent['id']}/subcategories", json={"name": "Lakes"}, headers=auth_header(token)
    )
    assert response.status_code == 201
    child = response.json()["data"]
    assert child["parent_id"] == parent["id"]

    response = client.delete(f"/api/categories/{parent['id']}", headers=auth_header(token))
    assert response.status_code == 400
    assert response.json()["error"] == "Cannot delete category: it has associated places or subcategories"

    response = client.delete(f"/api/categories/{child['id']}", headers=auth_header(token))
    assert response.status_code == 200
    assert client.get(f"/api/categories/{child['id']}").json()["data"]["is_active"] is False

    response = client.delete(f"/api/categories/{parent['id']}", headers=auth_header(token))
    assert response.status_code == 200


def test_delete_blocked_by_place(client, admin):
    _, token = admin
    category = _create(client, token, "Churches").json()["data"]
    create_place(client, token, category_ids=[category["id"]])

    response = client.delete(f"/api/categories/{category['id']}", headers=auth_header(token))
    assert response.status_code == 400
    assert client.get(f"/api/categories/{category['id']}").json()["data"]["is_active"] is True


def test_category_cannot_be_its_own_parent(client, admin):
    _, token = admin
    category = _create(client, token, "Food").json()["data"]
    response = client.put(
        f"/api/categories/{category['id']}", json={"parent_id": category["id"]}, headers=auth_header(token)
    )
    assert response.status_code == 400
    assert response.json()["error"] == "A category cannot be its own parent"


def test_category_cannot_move_under_its_descendant(client, admin):
    _, token = admin
    alpha = _create(client, token, "Alpha").json()["data"]
    beta = _create(client, token, "Beta", parent_id=alpha["id"]).json()["data"]
    gamma = _create(client, token, "Gamma", parent_id=beta["id"]).json()["data"]

    for descendant in (beta, gamma):
        response = client.put(
            f"/api/categories/{alpha['id']}", json={"parent_id": descendant["id"]}, headers=auth_header(token)
        )
        assert response.status_code == 400
        assert response.json()["error"] == "A category cannot be a subcategory of its own descendant"

    tree = client.get("/api/categories/tree").json()["data"]
    assert [node["id"] for node in tree] == [alpha["id"]]
    assert [child["id"] for child in tree[0]["children"]] == [beta["id"]]

    response = client.put(
        f"/api/categories/{gamma['id']}", json={"parent_id": alpha["id"]}, headers=auth_header(token)
    )
    assert response.status_code == 200


def test_category_update_rejects_null_for_required_fields(client, admin):
    _, token = admin
    category = _create(client, token, "Nightlife").json()["data"]
    for field in ("sort_order", "is_active", "name"):
        response = client.put(
            f"/api/categories/{category['id']}", json={field: None}, headers=auth_header(token)
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Validation error"


def test_tree_and_hierarchy(client, admin):
    _, token = admin
    culture = _create(client, token, "Culture", sort_order=1).json()["data"]
    outdoors = _create(client, token, "Outdoors", sort_order=2).json()["data"]
    museums = _create(client, token, "Museums", parent_id=culture["id"]).json()["data"]
    create_place(client, token, category_ids=[museums["id"]])

    tree = client.get("/api/categories/tree").json()["data"]
    assert [node["id"] for node in tree] == [culture["id"], outdoors["id"]]
    assert [child["id"] for child in tree[0]["children"]] == [museums["id"]]
    assert tree[0]["children"][0]["place_count"] == 1
    assert tree[1]["children"] == []

    hierarchy = client.get("/api/categories/hierarchy").json()["data"]
    assert [sub["id"] for sub in hierarchy[0]["subcategories"]] == [museums["id"]]


def test_reorder_is_applied(client, admin):
    _, token = admin
    first = _create(client, token, "First", sort_order=0).json()["data"]
    second = _create(client, token, "Second", sort_order=1).json()["data"]

    response = client.put(
        "/api/categories/reorder",
        json=[{"categoryId": first["id"], "sortOrder": 5}, {"categoryId": second["id"], "sortOrder": 0}],
        headers=auth_header(token),
    )
    assert response.status_code == 200
    assert [c["id"] for c in response.json()["data"]] == [second["id"], first["id"]]


def test_reorder_requires_both_fields(client, admin):
    _, token = admin
    first = _create(client, token, "First").json()["data"]
    response = client.put(
        "/api/categories/reorder", json=[{"categoryId": first["id"]}], headers=auth_header(token)
    )
    assert response.status_code == 400
    assert response.json()["error"] == "Each update must have categoryId and sortOrder"

    response = client.put("/api/categories/reorder", json=[], headers=auth_header(token))
    assert response.status_code == 400
    assert response.json()["error"] == "Category updates array is required"


def test_reorder_rolls_back_on_unknown_category(client, admin):
    _, token = admin
    first = _create(client, token, "First", sort_order=3).json()["data"]
    response = client.put(
        "/api/categories/reorder",
        json=[{"categoryId": first["id"], "sortOrder": 9}, {"categoryId": 999, "sortOrder": 1}],
        headers=auth_header(token),
    )
    assert response.status_code == 404
    assert client.get(f"/api/categories/{first['id']}").json()["data"]["sort_order"] == 3


def test_search_categories(client, admin):
    _, token = admin
    _create(client, token, "Street Food", description="Markets and stalls")
    _create(client, token, "Theatres")
    found = client.get("/api/categories/search", params={"q": "stalls"}).json()["data"]
    assert [c["name"] for c in found] == ["Street Food"]
