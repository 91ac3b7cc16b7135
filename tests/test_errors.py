import logging

from fastapi.testclient import TestClient

from cafe_pos.config import Settings
from cafe_pos.main import create_app
from cafe_pos.request_id import get_request_id


class TeapotError(Exception):
    status_code = 418


def _app_with_failures(environment: str):
    app = create_app(Settings(environment=environment))

    @app.get("/boom")
    def boom() -> dict:
        raise RuntimeError("kaboom")

    @app.get("/teapot")
    def teapot() -> dict:
        raise TeapotError("short and stout")

    return app


def test_unhandled_error_hides_stack_in_production() -> None:
    client = TestClient(_app_with_failures("production"), raise_server_exceptions=False)
    resp = client.get("/boom")
    assert resp.status_code == 500
    assert resp.json() == {"message": "kaboom", "stack": None}


def test_unhandled_error_includes_stack_in_development() -> None:
    client = TestClient(_app_with_failures("development"), raise_server_exceptions=False)
    resp = client.get("/boom")
    assert resp.status_code == 500
    body = resp.json()
    assert body["message"] == "kaboom"
    assert "RuntimeError: kaboom" in body["stack"]


def test_error_status_code_is_preserved() -> None:
    client = TestClient(_app_with_failures("production"), raise_server_exceptions=False)
    resp = client.get("/teapot")
    assert resp.status_code == 418
    assert resp.json()["message"] == "short and stout"


def test_unknown_route_uses_error_shape() -> None:
    client = TestClient(_app_with_failures("production"))
    resp = client.get("/api/nothing-here")
    assert resp.status_code == 404
    assert resp.json() == {"message": "Not Found", "stack": None}


def test_http_error_includes_stack_in_development() -> None:
    client = TestClient(_app_with_failures("development"))
    resp = client.get("/api/nothing-here")
    assert resp.status_code == 404
    body = resp.json()
    assert body["message"] == "Not Found"
    assert "HTTPException" in body["stack"]


class _RequestIdCapture(logging.Handler):
    def __init__(self) -> None:
        super().__init__()
        self.request_ids = []

    def emit(self, record: logging.LogRecord) -> None:
        self.request_ids.append(get_request_id())


def test_server_error_keeps_caller_request_id() -> None:
    app = _app_with_failures("production")
    capture = _RequestIdCapture()
    error_logger = logging.getLogger("cafe_pos.errors")
    error_logger.addHandler(capture)
    try:
        client = TestClient(app, raise_server_exceptions=False)
        resp = client.get("/boom", headers={"X-Request-ID": "req_trace_me"})
    finally:
        error_logger.removeHandler(capture)

    assert resp.status_code == 500
    assert resp.headers["X-Request-ID"] == "req_trace_me"
    assert capture.request_ids == ["req_trace_me"]


def test_server_error_without_caller_id_still_gets_one() -> None:
    client = TestClient(_app_with_failures("production"), raise_server_exceptions=False)
    resp = client.get("/boom")
    assert resp.status_code == 500
    assert resp.headers["X-Request-ID"].startswith("req_")
