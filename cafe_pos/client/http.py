from enum import Enum
from typing import Any, Optional

import httpx

DEFAULT_BASE_URL = "http://localhost:5000"


class FetchOutcome(str, Enum):
    """Why a read returned what it did."""

    OK = "ok"
    EMPTY = "empty"
    NOT_FOUND = "not_found"
    ERROR = "error"


def unwrap(body: Any, key: str) -> Any:
    """Normalise a response body to its payload.

    Accepts the server envelope ``{"data": ...}``, a keyed wrapper such as
    ``{"tables": [...]}``, or the bare payload.
    """
    if isinstance(body, dict):
        if "data" in body and "meta" in body:
            return body["data"]
        if key in body:
            return body[key]
    return body


class ApiClient:
    """Authenticated JSON client for the POS REST API."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        token: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.token = token
        self._http = httpx.Client(base_url=base_url, transport=transport)

    def _headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def request(self, method: str, path: str, **kwargs) -> httpx.Response:
        return self._http.request(method, path, headers=self._headers(), **kwargs)

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "ApiClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
