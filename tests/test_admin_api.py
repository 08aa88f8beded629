"""Tests for the admin JSON API."""
from unittest.mock import patch
import httpx
import backoffice.extensions as ext
from backoffice.services.ledger_service import LedgerError

COLOR = {"name": "Color", "values": ["Red", "Blue"]}
SIZE = {"name": "Size", "values": ["S", "M"]}


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code in (200, 503)
    data = resp.get_json()
    assert "status" in data


def test_health_does_not_leak_internal_errors(client, monkeypatch):
    def boom(*args, **kwargs):
        raise RuntimeError("database password leaked")

    monkeypatch.setattr(ext.db.session, "execute", boom)

    resp = client.get("/health")
    assert resp.status_code == 503
    data = resp.get_json()
    assert data["db"] == "error"
    assert "password" not in str(data).lower()


def test_generate_variants(client):
    resp = client.post(
        "/admin/variants/generate",
        json={
            "attributes": [COLOR, SIZE],
            "variants": [{"title": "Red / S", "price": 100}],
            "defaults": {"price": 10},
            "inventory_quantities": [{"location_id": 1, "available": 2, "on_hand": 2}],
        },
    )
    assert resp.status_code == 200
    data = resp.get_json()
    assert [v["title"] for v in data["variants"]] == ["Red / S", "Red / M", "Blue / S", "Blue / M"]
    assert data["variants"][0]["price"] == 100
    assert data["variants"][1]["price"] == 10
    assert data["missing_count"] == 0
    assert data["total_available"] == 8
    assert len(data["attributes"][0]["value_keys"]) == 2


def test_generate_variants_rejects_non_json(client):
    resp = client.post("/admin/variants/generate", data="nope", content_type="text/plain")
    assert resp.status_code == 400


def test_generate_variants_bad_attributes(client):
    resp = client.post("/admin/variants/generate", json={"attributes": "Color"})
    assert resp.status_code == 400
    assert resp.get_json()["notification"]["level"] == "error"


def test_missing_and_add_missing(client):
    body = {
        "attributes": [{"name": "Letter", "values": ["A", "B", "C"]}],
        "variants": [{"title": "A", "price": 7, "position": 1}],
    }
    resp = client.post("/admin/variants/missing", json=body)
    assert resp.get_json()["count"] == 2

    resp = client.post("/admin/variants/add-missing", json=body)
    data = resp.get_json()
    assert data["added"] == 2
    assert data["variants"][0] == {"title": "A", "price": 7, "position": 1}
    assert [v["position"] for v in data["variants"]] == [1, 2, 3]
    assert data["notification"]["level"] == "success"


def test_add_missing_nothing_to_add(client):
    resp = client.post(
        "/admin/variants/add-missing",
        json={"attributes": [COLOR], "variants": [{"title": "Red"}, {"title": "Blue"}]},
    )
    data = resp.get_json()
    assert data["added"] == 0
    assert data["notification"]["level"] == "info"


def test_allocation_edit_propagates(client):
    resp = client.post(
        "/admin/inventory/allocation",
        json={
            "inventory_quantities": [
                {"location_id": 1, "available": 0, "on_hand": 0},
                {"location_id": 2, "available": 0, "on_hand": 0},
            ],
            "variants": [{"title": "S"}, {"title": "M"}, {"title": "L"}],
            "location_id": 1,
            "value": 50,
        },
    )
    data = resp.get_json()
    assert resp.status_code == 200
    assert data["total_available"] == 150
    for variant in data["variants"]:
        assert {"location_id": 1, "available": 50, "on_hand": 50} in variant["inventory_quantities"]


def test_allocation_unknown_location(client):
    resp = client.post(
        "/admin/inventory/allocation",
        json={"inventory_quantities": [], "variants": [], "location_id": 3, "value": 1},
    )
    assert resp.status_code == 400


def test_locations_list(client, location):
    data = client.get("/admin/locations").get_json()
    assert location.id in [loc["id"] for loc in data["locations"]]
    assert {"location_id": location.id, "available": 0, "on_hand": 0} in data["inventory_quantities"]


def test_create_product_without_variants_gets_default(client, location):
    resp = client.post(
        "/admin/products",
        json={
            "name": "Gift Card",
            "attributes": [],
            "variants": [],
            "defaults": {"price": 50, "sku": "GIFT"},
            "inventory_quantities": [{"location_id": location.id, "available": 9}],
        },
        headers={"X-Admin-Id": "7"},
    )
    assert resp.status_code == 201
    product = resp.get_json()["product"]
    assert [(a["name"], a["values"]) for a in product["attributes"]] == [
        ("Title", ["Default Title"])
    ]
    (variant,) = product["variants"]
    assert variant["title"] == "Default Title"
    assert variant["option1"] == "Default Title"
    assert variant["sku"] == "GIFT"
    assert variant["inventory_quantities"] == [
        {"location_id": location.id, "available": 9, "on_hand": 9}
    ]

    editor = client.get(f"/admin/products/{product['id']}/editor").get_json()
    assert editor["has_default_variant"] is True
    assert editor["attributes"] == []
    assert editor["variants"] == []
    assert editor["defaults"]["sku"] == "GIFT"


def test_create_product_requires_name(client):
    resp = client.post("/admin/products", json={"name": "  "})
    assert resp.status_code == 400


def test_create_and_update_product(client, location):
    generated = client.post(
        "/admin/variants/generate",
        json={
            "attributes": [COLOR, SIZE],
            "defaults": {"price": 20},
            "inventory_quantities": [{"location_id": location.id, "available": 3, "on_hand": 3}],
        },
    ).get_json()

    resp = client.post(
        "/admin/products",
        json={
            "name": "Tee",
            "attributes": generated["attributes"],
            "variants": generated["variants"],
        },
    )
    assert resp.status_code == 201
    product = resp.get_json()["product"]
    assert len(product["variants"]) == 4
    assert all(v["id"] for v in product["variants"])

    # Drop size M: the S variants keep their ids
    color, size = generated["attributes"]
    size = dict(size, values=size["values"][:1], value_keys=size["value_keys"][:1])
    regenerated = client.post(
        "/admin/variants/generate",
        json={"attributes": [color, size], "variants": product["variants"]},
    ).get_json()
    assert [v["title"] for v in regenerated["variants"]] == ["Red / S", "Blue / S"]
    assert all(v.get("id") for v in regenerated["variants"])

    resp = client.put(
        f"/admin/products/{product['id']}",
        json={
            "name": "Tee",
            "attributes": regenerated["attributes"],
            "variants": regenerated["variants"],
        },
    )
    assert resp.status_code == 200
    updated = resp.get_json()["product"]
    assert [v["title"] for v in updated["variants"]] == ["Red / S", "Blue / S"]
    assert {v["id"] for v in updated["variants"]} <= {v["id"] for v in product["variants"]}


def test_update_unknown_product(client):
    resp = client.put("/admin/products/999999", json={"name": "Ghost"})
    assert resp.status_code == 404


def test_adjust_inventory_level(client, location):
    product = client.post(
        "/admin/products",
        json={
            "name": "Mug",
            "inventory_quantities": [{"location_id": location.id, "available": 10}],
        },
    ).get_json()["product"]
    variant_id = product["variants"][0]["id"]

    with patch("backoffice.services.inventory_service.ledger_service") as ledger:
        resp = client.put(
            "/admin/inventory-levels",
            json={"location_id": location.id, "variant_id": variant_id, "change_value": 5},
        )
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["new_quantity"] == 15
    assert data["level"]["available"] == 15
    ledger.record_adjustment.assert_called_once()

    levels = client.get(f"/admin/variants/{variant_id}/inventory-levels").get_json()
    assert levels["inventory_levels"][0]["available"] == 15


def test_adjust_inventory_level_zero_change(client, location):
    product = client.post("/admin/products", json={"name": "Spoon"}).get_json()["product"]
    variant_id = product["variants"][0]["id"]

    with patch("backoffice.services.inventory_service.ledger_service") as ledger:
        resp = client.put(
            "/admin/inventory-levels",
            json={"location_id": location.id, "variant_id": variant_id, "change_value": 0},
        )
    assert resp.status_code == 200
    assert resp.get_json()["change_value"] == 0
    ledger.record_adjustment.assert_not_called()


def test_adjust_inventory_level_ledger_failure(client, location):
    product = client.post("/admin/products", json={"name": "Plate"}).get_json()["product"]
    variant_id = product["variants"][0]["id"]

    with patch("backoffice.services.inventory_service.ledger_service") as ledger:
        ledger.record_adjustment.side_effect = LedgerError("down")
        resp = client.put(
            "/admin/inventory-levels",
            json={"location_id": location.id, "variant_id": variant_id, "change_value": 2},
        )
    assert resp.status_code == 502
    assert resp.get_json()["notification"]["message"] == "Inventory update failed"


def test_adjust_inventory_level_unknown_variant(client, location):
    resp = client.put(
        "/admin/inventory-levels",
        json={"location_id": location.id, "variant_id": 999999, "change_value": 2},
    )
    assert resp.status_code == 404


def test_adjust_inventory_level_plain_text_ledger_reply(client, location):
    product = client.post(
        "/admin/products",
        json={
            "name": "Bowl",
            "inventory_quantities": [{"location_id": location.id, "available": 4}],
        },
    ).get_json()["product"]
    variant_id = product["variants"][0]["id"]

    with patch("backoffice.services.ledger_service.httpx.request") as request:
        request.return_value = httpx.Response(200, text="OK")
        resp = client.put(
            "/admin/inventory-levels",
            json={"location_id": location.id, "variant_id": variant_id, "change_value": 3},
        )
    assert resp.status_code == 200
    assert resp.get_json()["level"]["available"] == 7
