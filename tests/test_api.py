import asyncio
import json

from fastapi.testclient import TestClient
from starlette.requests import Request

from distcheck_api.crypto import H
from distcheck_api.merkle import build_root
from distcheck_api.middleware.size_limit import SizeLimitMiddleware
from distcheck_api.settings import settings
from tests._helpers import distributor_json, make_entries


def _client():
    from distcheck_api.main import app as _app

    return TestClient(_app)


def test_healthz():
    r = _client().get("/healthz")
    assert r.status_code == 200
    assert r.json()["ok"] is True


def test_verify_valid_distribution():
    entries = make_entries(5)
    r = _client().post("/distributions/verify", json=distributor_json(entries))
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["valid"] is True
    assert body["recipient_count"] == 5
    assert body["rebuilt_root"] == H(build_root(entries))


def test_verify_reports_failures():
    raw = distributor_json(make_entries(4))
    account = next(iter(raw["recipients"]))
    raw["recipients"][account]["amount"] = "1"
    body = _client().post("/distributions/verify", json=raw).json()
    assert body["valid"] is False
    assert body["proofs_valid"] is False
    assert body["root_matches"] is False
    assert body["failed_accounts"] == [account]


def test_verify_unpublished_slot():
    r = _client().post(
        "/distributions/verify", json={"description": "later", "merkleRoot": ""}
    )
    assert r.status_code == 200
    assert r.json()["valid"] is True


def test_verify_malformed_node_is_400():
    raw = distributor_json(make_entries(2))
    raw["merkleRoot"] = "0x1234"
    r = _client().post("/distributions/verify", json=raw)
    assert r.status_code == 400
    assert "32 bytes" in r.json()["detail"]


def test_verify_schema_errors_are_422():
    raw = distributor_json(make_entries(2))
    raw["tokenTotal"] = 1.5
    assert _client().post("/distributions/verify", json=raw).status_code == 422


def test_root_endpoint():
    entries = make_entries(3)
    payload = {
        "entries": [
            {"index": e.index, "account": e.account.upper().replace("0X", "0x"), "amount": str(e.amount)}
            for e in entries
        ]
    }
    r = _client().post("/distributions/root", json=payload)
    assert r.status_code == 200, r.text
    assert r.json()["root"] == H(build_root(entries))

    r = _client().post("/distributions/root", json={"entries": []})
    assert r.status_code == 422
    assert r.json()["detail"] == "no entries"


def test_oversize_payload(monkeypatch):
    monkeypatch.setattr(settings, "max_request_bytes", 512)
    raw = distributor_json(make_entries(10))
    assert len(json.dumps(raw)) > 512
    r = _client().post("/distributions/verify", json=raw)
    assert r.status_code == 413


def _chunks(data: bytes, size: int = 256):
    for i in range(0, len(data), size):
        yield data[i : i + size]


def test_oversize_chunked_payload_without_content_length(monkeypatch):
    monkeypatch.setattr(settings, "max_request_bytes", 512)
    data = json.dumps(distributor_json(make_entries(10))).encode()
    assert len(data) > 512
    r = _client().post(
        "/distributions/verify",
        content=_chunks(data),
        headers={"content-type": "application/json"},
    )
    assert r.status_code == 413
    assert r.json()["detail"] == "payload too large"


def test_small_chunked_payload_reaches_the_app():
    entries = make_entries(3)
    data = json.dumps(distributor_json(entries)).encode()
    r = _client().post(
        "/distributions/verify",
        content=_chunks(data),
        headers={"content-type": "application/json"},
    )
    assert r.status_code == 200, r.text
    assert r.json()["rebuilt_root"] == H(build_root(entries))


def test_size_limit_stops_reading_once_over(monkeypatch):
    monkeypatch.setattr(settings, "max_request_bytes", 1024)
    received = []
    sent = []
    app_called = []

    async def app(scope, receive, send):
        app_called.append(scope)

    async def receive():
        received.append(1)
        # an endless 4 KiB-per-message body
        return {"type": "http.request", "body": b"x" * 4096, "more_body": True}

    async def send(message):
        sent.append(message)

    scope = {"type": "http", "method": "POST", "path": "/", "headers": [], "query_string": b""}
    asyncio.run(SizeLimitMiddleware(app)(scope, receive, send))

    assert app_called == []
    assert len(received) == 1
    assert sent[0]["type"] == "http.response.start"
    assert sent[0]["status"] == 413


def test_size_limit_replays_body_to_the_app():
    seen = []
    messages = [
        {"type": "http.request", "body": b'{"a":', "more_body": True},
        {"type": "http.request", "body": b" 1}", "more_body": False},
    ]

    async def app(scope, receive, send):
        seen.append(await Request(scope, receive).body())

    async def receive():
        return messages.pop(0)

    async def send(message):
        pass

    scope = {"type": "http", "method": "POST", "path": "/", "headers": [], "query_string": b""}
    asyncio.run(SizeLimitMiddleware(app)(scope, receive, send))
    assert seen == [b'{"a": 1}']
