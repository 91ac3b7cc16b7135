import httpx
import pytest

from cafe_pos.client import (
    UNASSIGNED_FLOOR_ID,
    ApiClient,
    FetchOutcome,
    TablesClient,
    map_backend_table,
)

BACKEND_TABLE = {
    "id": "t-1",
    "table_number": "5",
    "seats": 4,
    "status": "OCCUPIED",
    "floor_id": "f-1",
    "floor": {"id": "f-1", "branch_id": "b-1", "name": "Ground Floor"},
}


def _client(handler) -> TablesClient:
    return TablesClient(ApiClient(base_url="http://pos.test", token="tok", transport=httpx.MockTransport(handler)))


def test_map_keeps_backend_fields() -> None:
    table = map_backend_table(BACKEND_TABLE)
    assert table.id == "t-1"
    assert table.table_number == "5"
    assert table.seats == 4
    assert table.status == "OCCUPIED"
    assert table.floor_id == "f-1"
    assert table.branch_id == "b-1"


def test_map_falls_back_to_nested_floor_then_placeholder() -> None:
    nested = map_backend_table({"id": 1, "table_number": 2, "status": "FREE", "floor": {"id": "f-9"}})
    assert nested.id == "1"
    assert nested.table_number == "2"
    assert nested.floor_id == "f-9"
    assert nested.branch_id is None

    bare = map_backend_table({"id": "t", "table_number": "3", "status": "RESERVED", "branch_id": "b-2"})
    assert bare.floor_id == UNASSIGNED_FLOOR_ID
    assert bare.branch_id == "b-2"


def test_map_rejects_unknown_status() -> None:
    with pytest.raises(ValueError):
        map_backend_table({**BACKEND_TABLE, "status": "CLEANING"})


@pytest.mark.parametrize(
    "body",
    [
        {"data": [BACKEND_TABLE], "meta": {"request_id": "req_1", "warnings": []}},
        {"tables": [BACKEND_TABLE]},
        [BACKEND_TABLE],
    ],
)
def test_list_tables_accepts_every_body_shape(body) -> None:
    result = _client(lambda request: httpx.Response(200, json=body)).list_tables()
    assert result.outcome is FetchOutcome.OK
    assert [table.id for table in result.tables] == ["t-1"]


def test_list_tables_sends_bearer_token_and_floor_filter() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers["Authorization"]
        seen["floor_id"] = request.url.params.get("floor_id")
        return httpx.Response(200, json=[])

    result = _client(handler).list_tables(floor_id="f-1")
    assert result.outcome is FetchOutcome.EMPTY
    assert result.tables == []
    assert seen == {"auth": "Bearer tok", "floor_id": "f-1"}


def test_list_tables_reports_server_and_network_errors() -> None:
    failed = _client(lambda request: httpx.Response(500, json={"message": "down"})).list_tables()
    assert failed.outcome is FetchOutcome.ERROR
    assert failed.tables == []

    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    unreachable = _client(refuse).list_tables()
    assert unreachable.outcome is FetchOutcome.ERROR
    assert unreachable.tables == []


def test_get_table_distinguishes_missing_from_failure() -> None:
    missing = _client(lambda request: httpx.Response(404, json={"message": "Table not found"})).get_table("t-9")
    assert missing.outcome is FetchOutcome.NOT_FOUND
    assert not missing.found

    broken = _client(lambda request: httpx.Response(200, content=b"not json")).get_table("t-9")
    assert broken.outcome is FetchOutcome.ERROR
    assert broken.table is None


def test_get_table_escapes_the_id() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.raw_path.decode()
        return httpx.Response(200, json={"data": BACKEND_TABLE, "meta": {"request_id": "r", "warnings": []}})

    result = _client(handler).get_table("a/b")
    assert result.found
    assert result.table.floor_id == "f-1"
    assert seen["path"] == "/api/tables/a%2Fb"


def test_floor_stats_counts_statuses() -> None:
    rows = [
        {**BACKEND_TABLE, "id": "t-1", "status": "FREE"},
        {**BACKEND_TABLE, "id": "t-2", "status": "FREE"},
        {**BACKEND_TABLE, "id": "t-3", "status": "RESERVED"},
    ]
    stats = _client(lambda request: httpx.Response(200, json=rows)).floor_stats("f-1")
    assert stats == {"free": 2, "occupied": 0, "reserved": 1}


def test_list_floors_returns_empty_on_failure() -> None:
    ok = _client(
        lambda request: httpx.Response(200, json=[{"id": "f-1", "name": "Ground Floor", "table_count": 3}])
    ).list_floors("b-1")
    assert [(floor.id, floor.table_count) for floor in ok] == [("f-1", 3)]

    assert _client(lambda request: httpx.Response(503)).list_floors("b-1") == []


def test_map_prefers_direct_floor_id_over_nested_floor() -> None:
    table = map_backend_table(
        {
            "id": "t-4",
            "table_number": "4",
            "status": "FREE",
            "floor_id": "f-direct",
            "floor": {"id": "f-nested", "branch_id": "b-1"},
        }
    )
    assert table.floor_id == "f-direct"
    assert table.branch_id == "b-1"


def test_map_treats_numeric_and_text_table_numbers_alike() -> None:
    as_int = map_backend_table({**BACKEND_TABLE, "table_number": 5})
    as_text = map_backend_table({**BACKEND_TABLE, "table_number": "5"})
    assert as_int == as_text
    assert as_int.table_number == "5"


def test_get_table_reports_network_failure_without_a_table() -> None:
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    result = _client(refuse).get_table("t-1")
    assert result.outcome is FetchOutcome.ERROR
    assert result.table is None
    assert not result.found
