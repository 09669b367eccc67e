import pytest
from sqlalchemy.exc import OperationalError

import pinmap.main as main


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_unknown_paths_serve_the_client_page(client):
    r = client.get("/reports/some/deep/link")
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/html")
    assert "<title>PinMap</title>" in r.text


def test_static_file_is_served_directly(client):
    r = client.get("/index.html")
    assert r.status_code == 200
    assert 'id="api-endpoints"' in r.text
    assert 'id="pin-form"' not in r.text


def test_static_lookup_stays_inside_static_dir():
    assert main._static_file("../main.py") is None
    assert main._static_file("") is None


def test_oversize_body_is_refused(client):
    r = client.post(
        "/api/pins",
        content=b"x" * (main.settings.max_body_bytes + 1),
        headers={"content-type": "application/json"},
    )
    assert r.status_code == 413
    assert r.json() == {"error": "Request body too large"}


def test_oversize_chunked_body_is_refused(client):
    chunk = b"x" * 1_000_000
    pieces = main.settings.max_body_bytes // len(chunk) + 1

    def body():
        for _ in range(pieces):
            yield chunk

    r = client.post("/api/pins", content=body(), headers={"content-type": "application/json"})
    assert r.status_code == 413
    assert r.json() == {"error": "Request body too large"}
    assert client.get("/api/pins").json()["total"] == 0


def test_cors_header_present(client):
    r = client.get("/api/summary", headers={"origin": "http://example.org"})
    assert r.headers.get("access-control-allow-origin") == "*"


def test_startup_fails_when_store_is_unreachable(monkeypatch):
    def _down(*a, **kw):
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    monkeypatch.setattr(main, "ping", _down)
    with pytest.raises(OperationalError):
        main.on_startup()


def test_store_errors_become_minimal_500(client, monkeypatch):
    from pinmap.services import pins as pin_service

    def _boom(db):
        raise OperationalError("SELECT", {}, Exception("db gone"))

    monkeypatch.setattr(pin_service, "summarize", _boom)
    r = client.get("/api/summary")
    assert r.status_code == 500
    assert r.json() == {"error": "Internal server error"}
