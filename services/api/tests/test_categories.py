def _category_id(client, name):
    return next(c["id"] for c in client.get("/api/categories").json() if c["name"] == name)


def test_list_categories_in_display_order(client, seeded):
    res = client.get("/api/categories")
    assert res.status_code == 200
    names = [c["name"] for c in res.json()]
    assert len(names) == 13
    assert names[0] == "Grains & Dry Goods"
    assert names[-1] == "Nuts & Seeds"


def test_get_category_with_subcategories(client, seeded):
    res = client.get(f"/api/categories/{_category_id(client, 'Herbs')}")
    assert res.status_code == 200
    data = res.json()
    assert data["store_section"] == "Produce Section"
    assert [s["name"] for s in data["subcategories"]] == ["Fresh Herbs", "Dried Herbs"]


def test_get_unknown_category(client):
    assert client.get("/api/categories/9999").status_code == 404


def test_create_and_update_category(client):
    res = client.post("/api/categories", json={"name": "Bulk Bins", "store_section": "Aisle 9"})
    assert res.status_code == 201
    category = res.json()
    assert category["display_order"] == 0

    res = client.put(f"/api/categories/{category['id']}", json={"display_order": 4, "description": "Scoop it"})
    assert res.status_code == 200
    assert res.json()["display_order"] == 4
    assert res.json()["description"] == "Scoop it"
    assert res.json()["name"] == "Bulk Bins"


def test_duplicate_category_name(client, seeded):
    res = client.post("/api/categories", json={"name": "Herbs"})
    assert res.status_code == 409


def test_delete_category_with_ingredients(client, seeded):
    res = client.delete(f"/api/categories/{_category_id(client, 'Vegetables')}")
    assert res.status_code == 400


def test_delete_empty_category(client, seeded):
    category_id = _category_id(client, "Frozen Vegetables")
    assert client.delete(f"/api/categories/{category_id}").status_code == 204
    assert client.get(f"/api/categories/{category_id}").status_code == 404


def test_subcategory_lifecycle(client, seeded):
    category_id = _category_id(client, "Frozen Vegetables")

    res = client.post(f"/api/categories/{category_id}/subcategories", json={"name": "Peas & Corn"})
    assert res.status_code == 201
    sub = res.json()
    assert sub["category_id"] == category_id

    dup = client.post(f"/api/categories/{category_id}/subcategories", json={"name": "Peas & Corn"})
    assert dup.status_code == 409

    res = client.put(f"/api/subcategories/{sub['id']}", json={"description": "Bagged"})
    assert res.status_code == 200
    assert client.get(f"/api/subcategories/{sub['id']}").json()["description"] == "Bagged"

    listed = client.get(f"/api/categories/{category_id}/subcategories").json()
    assert [s["name"] for s in listed] == ["Peas & Corn"]

    assert client.delete(f"/api/subcategories/{sub['id']}").status_code == 204
    assert client.get(f"/api/subcategories/{sub['id']}").status_code == 404


def test_same_subcategory_name_in_other_category(client, seeded):
    category_id = _category_id(client, "Frozen Vegetables")
    res = client.post(f"/api/categories/{category_id}/subcategories", json={"name": "Leafy Greens"})
    assert res.status_code == 201


def test_delete_subcategory_with_ingredients(client, seeded):
    vegetables = _category_id(client, "Vegetables")
    leafy = next(
        s["id"] for s in client.get(f"/api/categories/{vegetables}/subcategories").json()
        if s["name"] == "Leafy Greens"
    )
    assert client.delete(f"/api/subcategories/{leafy}").status_code == 400
