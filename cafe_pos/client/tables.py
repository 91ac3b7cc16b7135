"""Floor-plan reads for POS screens.

Reads never raise: failures are logged and come back as empty results
tagged with a :class:`FetchOutcome` so callers can tell "nothing there"
from "could not ask".
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Literal, Mapping, Optional
from urllib.parse import quote

import httpx
from pydantic import BaseModel

from cafe_pos.client.http import ApiClient, FetchOutcome, unwrap

logger = logging.getLogger(__name__)

# Placeholder floor for tables that arrive without any floor reference.
# It names the "unassigned" floor, never a real one.
UNASSIGNED_FLOOR_ID = "floor-1"


class Table(BaseModel):
    id: str
    table_number: str
    seats: Optional[int] = None
    status: Literal["FREE", "OCCUPIED", "RESERVED"]
    floor_id: str
    branch_id: Optional[str] = None


class Floor(BaseModel):
    id: str
    name: str
    table_count: int = 0


@dataclass
class TableList:
    outcome: FetchOutcome
    tables: list[Table] = field(default_factory=list)


@dataclass
class TableLookup:
    outcome: FetchOutcome
    table: Optional[Table] = None

    @property
    def found(self) -> bool:
        return self.table is not None


def map_backend_table(raw: Mapping[str, Any]) -> Table:
    floor = raw.get("floor") or {}
    return Table(
        id=str(raw["id"]),
        table_number=str(raw["table_number"]),
        seats=raw.get("seats"),
        status=raw["status"],
        floor_id=raw.get("floor_id") or floor.get("id") or UNASSIGNED_FLOOR_ID,
        branch_id=floor.get("branch_id") or raw.get("branch_id"),
    )


class TablesClient:
    def __init__(self, api: ApiClient) -> None:
        self.api = api

    def list_tables(self, floor_id: Optional[str] = None) -> TableList:
        params = {"floor_id": floor_id} if floor_id else None
        try:
            response = self.api.request("GET", "/api/tables", params=params)
            if not response.is_success:
                logger.error("failed to fetch tables: HTTP %s", response.status_code)
                return TableList(FetchOutcome.ERROR)
            rows = unwrap(response.json(), "tables") or []
            tables = [map_backend_table(row) for row in rows]
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as exc:
            logger.error("get tables error: %s", exc)
            return TableList(FetchOutcome.ERROR)
        return TableList(FetchOutcome.OK if tables else FetchOutcome.EMPTY, tables)

    def get_table(self, table_id: str) -> TableLookup:
        try:
            response = self.api.request("GET", f"/api/tables/{quote(str(table_id), safe='')}")
            if response.status_code == 404:
                return TableLookup(FetchOutcome.NOT_FOUND)
            if not response.is_success:
                logger.error("failed to fetch table %s: HTTP %s", table_id, response.status_code)
                return TableLookup(FetchOutcome.ERROR)
            table = map_backend_table(unwrap(response.json(), "table"))
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as exc:
            logger.error("get table by id error: %s", exc)
            return TableLookup(FetchOutcome.ERROR)
        return TableLookup(FetchOutcome.OK, table)

    def list_floors(self, branch_id: str) -> list[Floor]:
        try:
            response = self.api.request("GET", "/api/floors", params={"branch_id": branch_id})
            if not response.is_success:
                logger.error("failed to fetch floors: HTTP %s", response.status_code)
                return []
            rows = unwrap(response.json(), "floors") or []
            return [
                Floor(id=str(row["id"]), name=row["name"], table_count=row.get("table_count", 0))
                for row in rows
            ]
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as exc:
            logger.error("get floors error: %s", exc)
            return []

    def floor_stats(self, floor_id: str) -> dict[str, int]:
        tables = self.list_tables(floor_id).tables
        return {
            "free": sum(1 for table in tables if table.status == "FREE"),
            "occupied": sum(1 for table in tables if table.status == "OCCUPIED"),
            "reserved": sum(1 for table in tables if table.status == "RESERVED"),
        }
