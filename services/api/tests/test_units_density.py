import pytest


@pytest.fixture
def spinach(seeded, ingredient_id):
    return ingredient_id("Fresh Spinach")


def test_list_densities(client, spinach, unit_id):
    res = client.get(f"/api/ingredients/{spinach}/densities")
    assert res.status_code == 200
    rows = res.json()
    assert len(rows) == 1
    assert rows[0]["volume_unit_id"] == unit_id("Cup")
    assert rows[0]["weight_unit"]["abbreviation"] == "g"
    assert rows[0]["conversion_factor"] == 30


def test_list_densities_unknown_ingredient(client, seeded):
    assert client.get("/api/ingredients/9999/densities").status_code == 404


def test_create_density_enables_conversion(client, spinach, unit_id):
    tbsp, gram = unit_id("Tablespoon"), unit_id("Gram")

    before = client.post("/api/units/convert", json={
        "quantity": 4, "from_unit_id": tbsp, "to_unit_id": gram, "ingredient_id": spinach,
    })
    assert before.status_code == 404

    res = client.post(f"/api/ingredients/{spinach}/densities", json={
        "volume_unit_id": tbsp, "weight_unit_id": gram, "conversion_factor": 1.9, "notes": "packed",
    })
    assert res.status_code == 201, res.text
    assert res.json()["notes"] == "packed"

    after = client.post("/api/units/convert", json={
        "quantity": 4, "from_unit_id": tbsp, "to_unit_id": gram, "ingredient_id": spinach,
    })
    assert after.status_code == 200
    assert after.json()["converted_quantity"] == pytest.approx(7.6)


def test_create_density_requires_volume_and_weight(client, spinach, unit_id):
    # Swapped sides
    res = client.post(f"/api/ingredients/{spinach}/densities", json={
        "volume_unit_id": unit_id("Gram"), "weight_unit_id": unit_id("Cup"), "conversion_factor": 30,
    })
    assert res.status_code == 400

    res = client.post(f"/api/ingredients/{spinach}/densities", json={
        "volume_unit_id": unit_id("Cup"), "weight_unit_id": unit_id("Dozen"), "conversion_factor": 30,
    })
    assert res.status_code == 400


def test_create_density_rejects_non_positive_factor(client, spinach, unit_id):
    res = client.post(f"/api/ingredients/{spinach}/densities", json={
        "volume_unit_id": unit_id("Tablespoon"), "weight_unit_id": unit_id("Gram"), "conversion_factor": 0,
    })
    assert res.status_code == 422


def test_create_duplicate_density(client, spinach, unit_id):
    res = client.post(f"/api/ingredients/{spinach}/densities", json={
        "volume_unit_id": unit_id("Cup"), "weight_unit_id": unit_id("Gram"), "conversion_factor": 31,
    })
    assert res.status_code == 409


def test_update_density(client, spinach, unit_id):
    density_id = client.get(f"/api/ingredients/{spinach}/densities").json()[0]["id"]

    res = client.put(f"/api/densities/{density_id}", json={"conversion_factor": 25})
    assert res.status_code == 200
    assert res.json()["conversion_factor"] == 25

    conv = client.post("/api/units/convert", json={
        "quantity": 2, "from_unit_id": unit_id("Cup"), "to_unit_id": unit_id("Gram"), "ingredient_id": spinach,
    })
    assert conv.json()["converted_quantity"] == 50


def test_update_density_cannot_clear_factor(client, spinach):
    density_id = client.get(f"/api/ingredients/{spinach}/densities").json()[0]["id"]
    res = client.put(f"/api/densities/{density_id}", json={"conversion_factor": None})
    assert res.status_code == 400


def test_delete_density(client, spinach):
    density_id = client.get(f"/api/ingredients/{spinach}/densities").json()[0]["id"]

    assert client.delete(f"/api/densities/{density_id}").status_code == 204
    assert client.get(f"/api/ingredients/{spinach}/densities").json() == []
    assert client.delete(f"/api/densities/{density_id}").status_code == 404
