"""Tests for the FastAPI routes (offline mode, no network)."""

import asyncio
import json

import pytest
from fastapi.testclient import TestClient

from backend.main import app
from backend.routes import analyze as analyze_routes
from backend.routes.analyze import stream_analysis
from listingtrust.config import Settings, get_settings
from listingtrust.schemas.models import PageFetchResult


@pytest.fixture
def client(offline_settings):
    app.dependency_overrides[get_settings] = lambda: offline_settings
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def _parse_sse(body: str) -> list[tuple[str, dict]]:
    events = []
    for frame in body.strip().split("\n\n"):
        lines = frame.splitlines()
        name = next(ln[len("event: "):] for ln in lines if ln.startswith("event: "))
        data = next(ln[len("data: "):] for ln in lines if ln.startswith("data: "))
        events.append((name, json.loads(data)))
    return events


class TestHealth:

    def test_health(self, client):
        r = client.get("/health")
        assert r.status_code == 200
        assert r.json()["status"] == "ok"


class TestAnalyze:

    def test_conflict_listing(self, client):
        r = client.post("/api/analyze", json={"url": "https://example.com/product/conflict"})
        assert r.status_code == 200
        data = r.json()
        assert data["verdict"] == "risk"
        assert "stock_conflict" in data["flags"]
        assert data["insight"] is None
        assert data["previewImage"] is None
        assert isinstance(data["processingMs"], int)

    def test_clear_listing(self, client):
        data = client.post("/api/analyze", json={"url": "https://example.com/product/clear"}).json()
        assert data["verdict"] == "good"
        assert data["flags"] == []
        assert data["insight"]["pros"]

    def test_missing_url(self, client):
        data = client.post("/api/analyze", json={}).json()
        assert data["flags"] == ["invalid_url"]
        assert data["verdict"] == "unclear"
        assert data["steps"] == [{"name": "Validate URL", "status": "failed", "detail": "Missing URL"}]

    def test_unparsable_body(self, client):
        r = client.post(
            "/api/analyze", content=b"{not json", headers={"content-type": "application/json"}
        )
        assert r.status_code == 200
        data = r.json()
        assert data["flags"] == ["analysis_failed"]
        assert data["steps"][0]["name"] == "Parse request"
        assert data["steps"][0]["status"] == "failed"


class TestAnalyzeStream:

    def test_stream_ends_with_done(self, client):
        with client.stream(
            "GET", "/api/analyze-stream", params={"url": "https://example.com/product/conflict"}
        ) as r:
            assert r.headers["content-type"].startswith("text/event-stream")
            body = "".join(r.iter_text())
        events = _parse_sse(body)
        names = [name for name, _ in events]
        assert names[-1] == "done"
        assert names.count("done") == 1
        assert events[0] == ("activity", {"message": "Validating URL and user inputs"})
        stage_names = [payload.get("name") for name, payload in events if name == "activity"][1:]
        assert stage_names == ["extract_rules", "parse_documents", "analyze_rules", "finalize"]
        assert events[-1][1]["verdict"] == "risk"

    def test_stream_invalid_url(self, client):
        with client.stream("POST", "/api/analyze-stream", json={"url": "nope"}) as r:
            body = "".join(r.iter_text())
        events = _parse_sse(body)
        assert [name for name, _ in events] == ["activity", "done"]
        assert events[-1][1]["flags"] == ["invalid_url"]


class TestStreamProducer:

    async def test_producer_collected_after_done(self, offline_settings):
        before = set(analyze_routes._producers)
        frames = [f async for f in stream_analysis("https://example.com/product/clear", offline_settings)]
        assert frames[-1].startswith("event: done")
        await asyncio.sleep(0)  # done callbacks run on the next loop iteration
        assert analyze_routes._producers <= before

    async def test_producer_survives_disconnect(self, offline_settings):
        before = set(analyze_routes._producers)
        stream = stream_analysis("https://example.com/product/clear", offline_settings)
        first = await stream.__anext__()
        assert first.startswith("event: activity")
        await stream.aclose()
        for _ in range(100):
            if analyze_routes._producers <= before:
                break
            await asyncio.sleep(0.01)
        assert analyze_routes._producers <= before


class TestFetchPage:

    def test_invalid_url_is_blocked(self, client):
        r = client.post("/api/fetch-page", json={"url": "not a url"})
        assert r.json() == {"blocked": True}

    def test_bad_body_is_blocked(self, client):
        r = client.post(
            "/api/fetch-page", content=b"oops", headers={"content-type": "application/json"}
        )
        assert r.json() == {"blocked": True}

    def test_fetched_html_returned(self, client, monkeypatch):
        async def fake_fetch(url, timeout=10.0):
            return PageFetchResult(blocked=False, html="<html><title>Kettle</title></html>")

        monkeypatch.setattr("backend.routes.fetch_page.fetch_page_html", fake_fetch)
        r = client.post("/api/fetch-page", json={"url": "https://shop.test/p/kettle"})
        assert r.json() == {"blocked": False, "html": "<html><title>Kettle</title></html>"}


def test_settings_override_is_live():
    # live mode without an agent configured still answers with a complete result
    settings = Settings(listingtrust_mode="live", agent_api_url=None, agent_api_key=None)
    app.dependency_overrides[get_settings] = lambda: settings
    try:
        with TestClient(app) as c:
            data = c.post("/api/analyze", json={"url": "https://shop.test/p/kettle"}).json()
    finally:
        app.dependency_overrides.clear()
    assert data["flags"] == ["analysis_failed"]
    assert data["steps"][-1]["name"] == "Fetch agent data"
