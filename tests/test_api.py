from fastapi.testclient import TestClient

from soupschema.api import create_app
from soupschema.config import ApiSettings

SCHEMA = {"selector": ".parent", "title": {"selector": "h2", "target": "text"}}


def test_extract_endpoint():
    client = TestClient(create_app(ApiSettings()))
    resp = client.post(
        "/extract",
        json={"html": '<div class="parent"><h2>w</h2><h2>r</h2></div>', "schema": SCHEMA, "fragment": True},
    )
    assert resp.status_code == 200
    assert resp.json() == {"result": {"title": [{"text": "w"}, {"text": "r"}]}}


def test_compile_endpoint_reports_errors():
    client = TestClient(create_app(ApiSettings()))
    ok = client.post("/compile", json={"schema": SCHEMA})
    assert ok.json() == {"ok": True, "fields": ["title"], "nodes": 2}
    bad = client.post("/compile", json={"schema": {"selector": "div", "bad": {"selector": "a["}}})
    assert bad.status_code == 422
    assert bad.json()["detail"]["kind"] == "selector"
    assert bad.json()["detail"]["path"] == ["bad"]
    missing = client.post("/compile", json={"schema": {"target": "text"}})
    assert missing.json()["detail"]["kind"] == "format"


def test_auth_and_size_limit():
    client = TestClient(create_app(ApiSettings(enable_auth=True, token="s3cret", max_document_bytes=32)))
    payload = {"html": "<p>x</p>", "schema": {"selector": "p", "target": "text"}}
    assert client.post("/extract", json=payload).status_code == 401
    headers = {"Authorization": "Bearer s3cret"}
    resp = client.post("/extract", json=payload, headers=headers)
    assert resp.json() == {"result": {"text": "x"}}
    big = dict(payload, html="<p>" + "x" * 64 + "</p>")
    assert client.post("/extract", json=big, headers=headers).status_code == 413
    assert client.get("/health").json() == {"status": "ok"}
