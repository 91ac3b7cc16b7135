import json
from itertools import count

import httpx
import pytest

from cafe_pos.client import ApiClient, CustomerStore, RemoteCustomerStore, provide_customers, use_customers
from cafe_pos.client import customers as customers_module


def test_add_assigns_fresh_ids_and_zero_sales() -> None:
    store = CustomerStore()
    first = store.add("Asha", phone="555-0101")
    second = store.add("Ben", email="ben@example.com")

    assert len(first.id) == 9
    assert first.id != second.id
    assert first.total_sales == 0
    assert first.created_at
    assert [c.name for c in store.customers] == ["Asha", "Ben"]
    assert store.is_loading is False


def test_add_regenerates_colliding_ids(monkeypatch) -> None:
    ids = iter(["aaaaaaaaa", "aaaaaaaaa", "bbbbbbbbb"])
    monkeypatch.setattr(customers_module, "_random_id", lambda: next(ids))
    store = CustomerStore()
    assert store.add("One").id == "aaaaaaaaa"
    assert store.add("Two").id == "bbbbbbbbb"


def test_update_merges_and_ignores_unknown_ids() -> None:
    store = CustomerStore()
    customer = store.add("Asha", phone="555-0101")

    updated = store.update(customer.id, email="asha@example.com")
    assert updated.phone == "555-0101"
    assert updated.email == "asha@example.com"
    assert store.get(customer.id).email == "asha@example.com"

    before = store.customers
    assert store.update("missing", name="Nobody") is None
    assert store.customers == before


def test_delete_removes_only_matching_record() -> None:
    store = CustomerStore()
    keep = store.add("Keep")
    drop = store.add("Drop")

    store.delete(drop.id)
    store.delete("missing")
    assert [c.id for c in store.customers] == [keep.id]


def test_use_customers_requires_a_provider() -> None:
    with pytest.raises(RuntimeError):
        use_customers()

    store = CustomerStore()
    with provide_customers(store):
        assert use_customers() is store
    with pytest.raises(RuntimeError):
        use_customers()


def _fake_backend():
    rows = {}
    ids = count(1)

    def handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if request.method == "GET" and path == "/api/customers":
            return httpx.Response(200, json={"data": list(rows.values()), "meta": {"request_id": "r", "warnings": []}})
        if request.method == "POST" and path == "/api/customers":
            payload = json.loads(request.content)
            row = {**payload, "id": f"c{next(ids)}", "total_sales": 0, "created_at": "2024-01-01T00:00:00+00:00"}
            rows[row["id"]] = row
            return httpx.Response(201, json={"data": row, "meta": {"request_id": "r", "warnings": []}})
        customer_id = path.rsplit("/", 1)[-1]
        if customer_id not in rows:
            return httpx.Response(404, json={"message": "Customer not found", "stack": None})
        if request.method == "PUT":
            rows[customer_id].update(json.loads(request.content))
            return httpx.Response(200, json={"data": rows[customer_id], "meta": {"request_id": "r", "warnings": []}})
        if request.method == "DELETE":
            del rows[customer_id]
            return httpx.Response(204)
        return httpx.Response(405)

    return rows, handler


def test_remote_store_round_trips_through_api() -> None:
    rows, handler = _fake_backend()
    store = RemoteCustomerStore(ApiClient(base_url="http://pos.test", transport=httpx.MockTransport(handler)))

    created = store.add("Asha", phone="555-0101")
    assert created.id == "c1"
    assert rows["c1"]["name"] == "Asha"

    store.update("c1", email="asha@example.com")
    assert rows["c1"]["email"] == "asha@example.com"
    assert store.get("c1").email == "asha@example.com"

    assert store.update("missing", name="Nobody") is None
    store.delete("missing")

    store.delete("c1")
    assert rows == {}
    assert store.customers == []


def test_remote_store_refresh_loads_existing_rows() -> None:
    rows, handler = _fake_backend()
    rows["c7"] = {"id": "c7", "name": "Regular", "phone": None, "email": None, "total_sales": 12.5, "created_at": "x"}
    store = RemoteCustomerStore(ApiClient(base_url="http://pos.test", transport=httpx.MockTransport(handler)))

    loaded = store.refresh()
    assert [(c.id, c.total_sales) for c in loaded] == [("c7", 12.5)]
    assert store.is_loading is False


def test_thousand_adds_yield_unique_ids() -> None:
    store = CustomerStore()
    for number in range(1000):
        store.add(f"Guest {number}")

    customers = store.customers
    assert len(customers) == 1000
    assert len({c.id for c in customers}) == 1000
    assert all(c.total_sales == 0 for c in customers)
    assert all(len(c.id) == 9 for c in customers)
