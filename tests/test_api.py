import importlib
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from config import settings

HEADERS = {"X-API-Key": settings.api_key}


@pytest.fixture
def client(db_file, monkeypatch):
    # Point the API at a per-test database before its module-level store is built
    monkeypatch.setenv("BOOKSTORE_DB_FILE", db_file)

    import api as api_module
    importlib.reload(api_module)

    with TestClient(api_module.app) as test_client:
        yield test_client


def _create(client, neverland, **overrides):
    response = client.post("/books", headers=HEADERS, json={**neverland, **overrides})
    assert response.status_code == 201
    return response.json()


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["total_books"] == 0


def test_get_books_empty(client):
    response = client.get("/books")
    assert response.status_code == 200
    assert response.json() == []


def test_create_and_get_book(client, neverland):
    created = _create(client, neverland)
    assert created == {"id": created["id"], **neverland}

    response = client.get(f"/books/{created['id']}")
    assert response.status_code == 200
    assert response.json() == created


def test_create_requires_api_key(client, neverland):
    response = client.post("/books", headers={"X-API-Key": "invalid-key"}, json=neverland)
    assert response.status_code == 403


def test_create_missing_field_names_it(client, neverland):
    del neverland["supplier_name"]
    response = client.post("/books", headers=HEADERS, json=neverland)
    assert response.status_code == 400
    assert response.json()["detail"]["field"] == "supplier_name"
    assert client.get("/books").json() == []


def test_create_negative_quantity(client, neverland):
    response = client.post("/books", headers=HEADERS, json={**neverland, "quantity": -1})
    assert response.status_code == 400
    assert response.json()["detail"]["field"] == "quantity"


def test_get_missing_book(client):
    assert client.get("/books/99").status_code == 404


def test_get_negative_id_is_not_found(client):
    assert client.get("/books/-1").status_code == 404


def test_create_with_integer_phone(client, neverland):
    response = client.post("/books", headers=HEADERS, json={**neverland, "supplier_phone": 5551234})
    assert response.status_code == 201
    assert response.json()["supplier_phone"] == "5551234"


def test_patch_with_integer_phone(client, neverland):
    created = _create(client, neverland)
    response = client.patch(f"/books/{created['id']}", headers=HEADERS, json={"supplier_phone": 5550000})
    assert response.status_code == 200
    assert response.json()["supplier_phone"] == "5550000"


def test_filter_and_sort(client, neverland):
    _create(client, neverland, name="B", quantity=0)
    _create(client, neverland, name="A", quantity=2, supplier_name="Other")
    _create(client, neverland, name="C", quantity=1)

    response = client.get("/books", params={"in_stock": "true", "sort_by": "name", "order": "desc"})
    assert [b["name"] for b in response.json()] == ["C", "A"]
    assert response.headers["X-Total-Count"] == "2"

    response = client.get("/books", params={"supplier_name": "Other"})
    assert [b["name"] for b in response.json()] == ["A"]


def test_invalid_sort(client):
    assert client.get("/books", params={"sort_by": "supplier_phone"}).status_code == 400
    assert client.get("/books", params={"order": "sideways"}).status_code == 400


def test_summary_uses_display_price(client, neverland):
    created = _create(client, neverland)
    response = client.get("/books/summary")
    assert response.status_code == 200
    assert response.json() == [
        {"id": created["id"], "name": "Neverland", "author": "J.M. Barrie", "quantity": 3, "price": "12€"}
    ]


def test_patch_book(client, neverland):
    created = _create(client, neverland)
    response = client.patch(f"/books/{created['id']}", headers=HEADERS, json={"price": 15})
    assert response.status_code == 200
    assert response.json()["price"] == 15
    assert response.json()["name"] == "Neverland"


def test_patch_empty_body(client, neverland):
    created = _create(client, neverland)
    response = client.patch(f"/books/{created['id']}", headers=HEADERS, json={})
    assert response.status_code == 400


def test_patch_null_name_is_rejected(client, neverland):
    created = _create(client, neverland)
    response = client.patch(f"/books/{created['id']}", headers=HEADERS, json={"name": None})
    assert response.status_code == 400
    assert client.get(f"/books/{created['id']}").json()["name"] == "Neverland"


def test_patch_missing_book(client):
    response = client.patch("/books/77", headers=HEADERS, json={"quantity": 1})
    assert response.status_code == 404


def test_delete_book(client, neverland):
    created = _create(client, neverland)
    assert client.delete(f"/books/{created['id']}", headers=HEADERS).status_code == 200
    assert client.delete(f"/books/{created['id']}", headers=HEADERS).status_code == 404


def test_delete_all_books(client, neverland):
    _create(client, neverland)
    _create(client, neverland)
    response = client.delete("/books", headers=HEADERS)
    assert response.json() == {"deleted": 2}


def test_sell_book(client, neverland):
    created = _create(client, neverland, quantity=1)

    response = client.post(f"/books/{created['id']}/sell", headers=HEADERS)
    assert response.json() == {"id": created["id"], "sold": True, "quantity": 0}

    response = client.post(f"/books/{created['id']}/sell", headers=HEADERS)
    assert response.json() == {"id": created["id"], "sold": False, "quantity": 0}


def test_sell_missing_book(client):
    assert client.post("/books/8/sell", headers=HEADERS).status_code == 404


def test_sell_reads_the_book_once(client, neverland, monkeypatch):
    import api as api_module

    created = _create(client, neverland, quantity=2)
    get_one = MagicMock(wraps=api_module.store.get_one)
    monkeypatch.setattr(api_module.store, "get_one", get_one)

    response = client.post(f"/books/{created['id']}/sell", headers=HEADERS)
    assert response.json() == {"id": created["id"], "sold": True, "quantity": 1}
    get_one.assert_called_once_with(created["id"])
