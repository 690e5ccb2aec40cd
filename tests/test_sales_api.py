"""
Tests for the sales HTTP endpoints (`api/routers/sales.py`, `api/main.py`).

The service dependency is overridden with one backed by the in-memory
collaborators from conftest, so no Supabase credentials are needed.
"""

from __future__ import annotations

from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from api.deps import get_sale_service
from api.main import app
from domain.errors import PersistenceError


@pytest.fixture
def client(service):
    app.dependency_overrides[get_sale_service] = lambda: service
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def _headers(principal) -> dict:
    return {"X-User-Id": str(principal.principal_id), "X-User-Role": principal.role.value}


def _create(client, principal, items, **extra):
    body = {"items": items, "payment_method": "cash"}
    body.update(extra)
    return client.post("/api/v1/sales", json=body, headers=_headers(principal))


def test_health(client) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_missing_identity_is_unauthorized(client, widget_items) -> None:
    response = client.post("/api/v1/sales", json={"items": widget_items, "payment_method": "cash"})

    assert response.status_code == 401
    assert response.json()["success"] is False


def test_unknown_role_is_unauthorized(client, seller) -> None:
    headers = {"X-User-Id": str(seller.principal_id), "X-User-Role": "vendedor"}

    assert client.get("/api/v1/sales", headers=headers).status_code == 401


def test_create_returns_201_with_string_money(client, seller, widget_items) -> None:
    response = _create(client, seller, widget_items, total_amount="0.01")

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["sale"]["total_amount"] == "25.48"
    assert [i["price_at_sale"] for i in body["sale"]["items"]] == ["9.99", "5.50"]
    assert body["sale"]["user_id"] == str(seller.principal_id)
    assert body["sale"]["status"] == "completed"


def test_create_with_empty_items_is_400(client, seller, sale_repository) -> None:
    response = _create(client, seller, [])

    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "Sale must contain at least one product"}
    assert sale_repository.writes == []


def test_create_with_bad_quantity_names_position(client, seller, widget_items) -> None:
    widget_items[0]["quantity"] = 1.5

    response = _create(client, seller, widget_items)

    assert response.status_code == 400
    assert "position 1" in response.json()["message"]


def test_seller_assigning_other_user_is_403(client, seller, other_seller, sale_repository, widget_items) -> None:
    response = _create(client, seller, widget_items, user_id=str(other_seller.principal_id))

    assert response.status_code == 403
    assert sale_repository.writes == []


def test_admin_reads_seller_sale(client, admin, seller, widget_items) -> None:
    created = _create(client, seller, widget_items).json()["sale"]

    response = client.get(f"/api/v1/sales/{created['id']}", headers=_headers(admin))

    assert response.status_code == 200
    assert response.json()["sale"] == created


def test_single_sale_status_codes(client, seller, other_seller, widget_items) -> None:
    created = _create(client, other_seller, widget_items).json()["sale"]

    assert client.get("/api/v1/sales/not-an-id", headers=_headers(seller)).status_code == 400
    assert client.get(f"/api/v1/sales/{uuid4()}", headers=_headers(seller)).status_code == 404
    assert client.get(f"/api/v1/sales/{created['id']}", headers=_headers(seller)).status_code == 403


def test_seller_list_ignores_user_filter(client, admin, seller, other_seller, widget_items) -> None:
    _create(client, seller, widget_items)
    _create(client, other_seller, widget_items)
    _create(client, admin, widget_items, user_id=str(other_seller.principal_id))

    response = client.get(
        "/api/v1/sales",
        params={"user": str(other_seller.principal_id)},
        headers=_headers(seller),
    )

    body = response.json()
    assert response.status_code == 200
    assert body["count"] == 1
    assert {s["user_id"] for s in body["sales"]} == {str(seller.principal_id)}


def test_admin_list_filters_by_user(client, admin, seller, other_seller, widget_items) -> None:
    _create(client, seller, widget_items)
    _create(client, other_seller, widget_items)

    response = client.get(
        "/api/v1/sales",
        params={"user": str(other_seller.principal_id)},
        headers=_headers(admin),
    )

    assert response.json()["count"] == 1
    assert response.json()["sales"][0]["user_id"] == str(other_seller.principal_id)


def test_update_recomputes_total(client, manager, seller, widget_items) -> None:
    created = _create(client, seller, widget_items).json()["sale"]

    response = client.put(
        f"/api/v1/sales/{created['id']}",
        json={
            "items": [{"product_id": 3, "name": "Part", "price_at_sale": 1.005, "quantity": 3}],
            "total_amount": "25.48",
        },
        headers=_headers(manager),
    )

    assert response.status_code == 200
    sale = response.json()["sale"]
    assert sale["total_amount"] == "3.03"
    assert sale["items"] == [{"product_id": 3, "name": "Part", "price_at_sale": "1.01", "quantity": 3}]
    assert sale["payment_method"] == created["payment_method"]


def test_seller_update_is_403(client, seller, widget_items) -> None:
    created = _create(client, seller, widget_items).json()["sale"]

    response = client.put(
        f"/api/v1/sales/{created['id']}",
        json={"status": "cancelled"},
        headers=_headers(seller),
    )

    assert response.status_code == 403


def test_malformed_body_is_400(client, seller) -> None:
    response = client.post(
        "/api/v1/sales",
        content="not json",
        headers={**_headers(seller), "Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json()["success"] is False


def test_persistence_failure_is_generic_500(client, seller, sale_repository, widget_items) -> None:
    def broken_find(sale_filter):
        raise PersistenceError("Failed to list sales: connection refused to db.internal")

    sale_repository.find = broken_find

    response = client.get("/api/v1/sales", headers=_headers(seller))

    assert response.status_code == 500
    assert response.json() == {"success": False, "message": "Internal server error"}


def test_out_of_range_sale_date_is_400(client, seller, widget_items) -> None:
    response = _create(client, seller, widget_items, sale_date="0001-01-01T00:00:00+05:00")

    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "Invalid sale date"}


def test_unexpected_failure_is_generic_500(service, seller, sale_repository) -> None:
    def broken_find(sale_filter):
        raise RuntimeError("SUPABASE_URL and SUPABASE_KEY must be set")

    sale_repository.find = broken_find
    app.dependency_overrides[get_sale_service] = lambda: service
    try:
        response = TestClient(app, raise_server_exceptions=False).get(
            "/api/v1/sales", headers=_headers(seller)
        )
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 500
    assert response.json() == {"success": False, "message": "Internal server error"}
