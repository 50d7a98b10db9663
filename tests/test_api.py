"""
Tests for the HTTP endpoints.
"""
import pytest
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient

from baton_events.core.config import settings
from baton_events.main import app
from baton_events.models.schemas import Event, EventSource
from baton_events.services.event_manager import event_manager


@pytest.fixture(autouse=True)
def clean_log():
    event_manager.event_log.clear()
    yield
    event_manager.event_log.clear()


@pytest.fixture
def client():
    """Create a test client with lifespan."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
async def async_client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


class TestInfoEndpoints:
    """Tests for health and root endpoints."""

    def test_health_check(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        data = response.json()
        assert data["service"] == "baton-event-service"
        assert "version" in data


class TestIngestEndpoints:
    """Tests for the three ingestion entry points."""

    def test_legacy_ok(self, client):
        response = client.post("/api/events", content="0024049886")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_legacy_empty(self, client):
        response = client.post("/api/events", content="   ")
        assert response.status_code == 400
        assert response.json() == {"status": "error", "message": "No raw string received"}

    @pytest.mark.parametrize("path", ["/api/events/hookdeck", "/api/events/direct"])
    def test_newer_sources_received(self, client, path):
        response = client.post(path, content="0024049886")
        assert response.status_code == 200
        assert response.json() == {"status": "received"}

    @pytest.mark.parametrize("path", ["/api/events/hookdeck", "/api/events/direct"])
    def test_newer_sources_empty(self, client, path):
        response = client.post(path, content="")
        assert response.status_code == 400
        assert response.json() == {"error": "No message received"}

    def test_empty_payload_is_not_logged(self, client):
        client.post("/api/events/direct", content="")
        assert client.get("/api/events/all").json() == []

    def test_any_content_type_is_read_as_text(self, client):
        response = client.post(
            "/api/events/direct",
            content="0024049886",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 200
        assert client.get("/api/events/all").json()[0]["isValid"] is True

    def test_oversized_body_rejected(self, client, monkeypatch):
        monkeypatch.setattr(settings, "max_body_bytes", 16)
        response = client.post("/api/events/direct", content="0" * 17)
        assert response.status_code == 413

    def test_oversized_chunked_body_rejected(self, client, monkeypatch):
        """Bodies without Content-Length are cut off once the limit is passed."""
        monkeypatch.setattr(settings, "max_body_bytes", 16)
        response = client.post("/api/events/direct", content=iter([b"0" * 10, b"0" * 10]))
        assert response.status_code == 413
        assert client.get("/api/events/all").json() == []

    def test_chunked_body_within_limit(self, client):
        response = client.post("/api/events/direct", content=iter([b"00240", b"49886"]))
        assert response.status_code == 200
        assert client.get("/api/events/all").json()[0]["rawText"] == "0024049886"


class TestRecentEndpoint:
    """Tests for GET /api/events/all."""

    def test_direct_event_round_trip(self, client):
        client.post("/api/events/direct", content="0024049886")

        events = client.get("/api/events/all").json()
        assert len(events) == 1
        event = events[0]
        assert event["rawText"] == "0024049886"
        assert event["source"] == "direct"
        assert event["isValid"] is True
        assert "timestamp" in event
        assert event["decoded"] == {
            "siteId": "0024",
            "messageCode": "04",
            "messageType": "Fire",
            "severity": "critical",
            "batonBattery": 98,
            "mainBattery": 86,
            "description": "Fire from site 0024 — Batteries: 98% / 86%",
        }

    def test_unparsed_event_listed(self, client):
        client.post("/api/events", content="hello baton")

        event = client.get("/api/events/all").json()[0]
        assert event["rawText"] == "hello baton"
        assert event["isValid"] is False
        assert event["decoded"] is None
        assert event["source"] == "legacy"

    def test_newest_first_with_limit(self, client):
        for i in range(3):
            client.post("/api/events/direct", content=f"msg-{i}")

        events = client.get("/api/events/all", params={"limit": 2}).json()
        assert [e["rawText"] for e in events] == ["msg-2", "msg-1"]

    def test_default_limit(self, client):
        for i in range(60):
            client.post("/api/events/hookdeck", content=f"msg-{i}")

        assert len(client.get("/api/events/all").json()) == 50
        assert len(client.get("/api/events/all", params={"limit": "abc"}).json()) == 50

    def test_negative_limit(self, client):
        client.post("/api/events/direct", content="msg")
        assert client.get("/api/events/all", params={"limit": -1}).json() == []

    def test_limit_capped_at_capacity(self, client):
        for i in range(1001):
            event_manager.event_log.append(Event(raw_text=f"msg-{i}", source=EventSource.DIRECT))

        events = client.get("/api/events/all", params={"limit": 2000}).json()
        assert len(events) == 1000
        assert events[-1]["rawText"] == "msg-1"


class TestStatusEndpoint:
    """Tests for GET /api/events/status."""

    async def test_status(self, async_client):
        await async_client.post("/api/events/direct", content="0024049886")

        response = await async_client.get("/api/events/status")
        assert response.status_code == 200
        data = response.json()
        assert data["events"] == 1
        assert data["capacity"] == 1000
        assert data["subscribers"] == 0
