"""Integration tests for staples and their use on shopping lists."""

from __future__ import annotations

from fastapi import status

from tests.integration.utils import auth_headers


def _new_list(client) -> int:
    response = client.post(
        "/shopping-lists", json={"start_date": "2025-03-10", "days": 1}, headers=auth_headers()
    )
    return response.json()["id"]


def test_upsert_creates_then_updates(client):
    headers = auth_headers()

    created = client.post(
        "/staples", json={"name": "Coffee", "quantity": "1 bag", "category": "Pantry"}, headers=headers
    )
    assert created.status_code == status.HTTP_201_CREATED
    assert created.json()["usage_count"] == 1

    updated = client.post("/staples", json={"name": "COFFEE"}, headers=headers)
    assert updated.status_code == status.HTTP_200_OK
    body = updated.json()
    assert body["id"] == created.json()["id"]
    assert body["name"] == "COFFEE"
    assert body["quantity"] == "1 bag"
    assert body["usage_count"] == 2


def test_blank_staple_name_is_rejected(client):
    response = client.post("/staples", json={"name": "  "}, headers=auth_headers())

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"] == "Staple name is required"


def test_custom_items_are_remembered_as_staples(client):
    headers = auth_headers()
    list_id = _new_list(client)

    client.post(f"/shopping-lists/{list_id}/items", json={"name": "Dish soap"}, headers=headers)
    client.post(
        f"/shopping-lists/{list_id}/items",
        json={"name": "dish soap", "quantity": "1 bottle"},
        headers=headers,
    )
    client.post(
        f"/shopping-lists/{list_id}/items",
        json={"name": "Birthday candles", "save_to_staples": False},
        headers=headers,
    )

    staples = client.get("/staples").json()
    assert [staple["name"] for staple in staples] == ["dish soap"]
    assert staples[0]["usage_count"] == 2
    assert staples[0]["quantity"] == "1 bottle"
    assert staples[0]["category"] == "Other"


def test_blank_custom_item_is_rejected_before_saving(client):
    list_id = _new_list(client)

    response = client.post(
        f"/shopping-lists/{list_id}/items", json={"name": "   "}, headers=auth_headers()
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert client.get(f"/shopping-lists/{list_id}").json()["items"] == []
    assert client.get("/staples").json() == []


def test_add_staples_to_list(client):
    headers = auth_headers()
    list_id = _new_list(client)
    eggs = client.post(
        "/staples", json={"name": "Eggs", "quantity": "12", "category": "Dairy & Eggs"}, headers=headers
    ).json()

    response = client.post(
        f"/shopping-lists/{list_id}/staples", json={"staple_ids": [eggs["id"]]}, headers=headers
    )

    assert response.status_code == status.HTTP_200_OK
    item = response.json()["items"][0]
    assert (item["name"], item["quantity"], item["category"]) == ("Eggs", "12", "Dairy & Eggs")
    assert client.get("/staples").json()[0]["usage_count"] == 2


def test_add_staples_errors(client):
    headers = auth_headers()
    list_id = _new_list(client)
    eggs = client.post("/staples", json={"name": "Eggs"}, headers=headers).json()

    unknown = client.post(
        f"/shopping-lists/{list_id}/staples", json={"staple_ids": [999]}, headers=headers
    )
    missing_list = client.post(
        "/shopping-lists/999/staples", json={"staple_ids": [eggs["id"]]}, headers=headers
    )
    empty = client.post(f"/shopping-lists/{list_id}/staples", json={"staple_ids": []}, headers=headers)

    assert unknown.status_code == status.HTTP_400_BAD_REQUEST
    assert unknown.json()["detail"] == "No valid staples found"
    assert missing_list.status_code == status.HTTP_404_NOT_FOUND
    assert empty.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_delete_and_clear_staples(client):
    headers = auth_headers()
    bread = client.post("/staples", json={"name": "Bread"}, headers=headers).json()
    client.post("/staples", json={"name": "Milk"}, headers=headers)

    assert client.delete(f"/staples/{bread['id']}", headers=headers).status_code == (
        status.HTTP_204_NO_CONTENT
    )
    assert client.delete(f"/staples/{bread['id']}", headers=headers).status_code == (
        status.HTTP_404_NOT_FOUND
    )

    response = client.delete("/staples", headers=headers)
    assert response.json() == {"message": "All staples cleared", "deleted_count": 1}
    assert client.get("/staples").json() == []
