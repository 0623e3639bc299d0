"""Tests for API routes."""
from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from medcompare.api.deps import get_browser_manager, get_orchestrator
from medcompare.errors import PrescriptionReadError
from medcompare.main import app
from medcompare.services.browser import BrowserManager
from medcompare.services.orchestrator import RetrievalOrchestrator
from medcompare.sources.base import SourceAdapter


class FakeBrowser:
    def is_connected(self) -> bool:
        return True

    def on(self, event, handler):
        pass

    async def close(self):
        pass


class StubAdapter(SourceAdapter):
    def __init__(self, source_id: str, products=None, hang: bool = False):
        self.source_id = source_id
        super().__init__()
        self.products = products or []
        self.hang = hang

    async def _fetch(self, keyword, browser):
        if self.hang:
            await asyncio.Event().wait()
        return self._success(self.products)


@pytest.fixture
def manager():
    async def launcher():
        return FakeBrowser()

    return BrowserManager(launcher=launcher)


@pytest.fixture
def client(manager):
    adapters = {
        "apollo": StubAdapter("apollo", products=[{"name": "Dolo 650"}, {"name": "Crocin"}]),
        "pharmeasy": StubAdapter("pharmeasy", hang=True),
        "netmeds": StubAdapter("netmeds", products=[{"name": "Calpol"}]),
    }
    orchestrator = RetrievalOrchestrator(
        manager,
        adapters=adapters,
        timeouts={"apollo": 1.0, "pharmeasy": 0.05, "netmeds": 1.0},
    )
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    app.dependency_overrides[get_browser_manager] = lambda: manager
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    data = response.json()
    assert data["ok"] is True
    assert data["browser"] == "unstarted"


def test_search_returns_one_entry_per_enabled_source(client):
    response = client.post(
        "/api/search",
        json={"keyword": "paracetamol", "enabledScrapers": {"apollo": True, "pharmeasy": True, "netmeds": False}},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["apollo"]["ok"] is True
    assert data["apollo"]["productsCount"] == 2
    assert data["pharmeasy"]["ok"] is False
    assert "timed out" in data["pharmeasy"]["error"]
    assert "netmeds" not in data


def test_search_defaults_to_all_sources(client):
    response = client.post("/api/search", json={"keyword": "paracetamol"})

    assert set(response.json()) == {"success", "apollo", "pharmeasy", "netmeds"}


def test_legacy_route_is_an_alias(client):
    response = client.post(
        "/api/apollo-search",
        json={"keyword": "paracetamol", "enabledScrapers": {"pharmeasy": False, "netmeds": False}},
    )

    assert response.status_code == 200
    assert set(response.json()) == {"success", "apollo"}


def test_request_timeouts_are_milliseconds(client):
    response = client.post(
        "/api/search",
        json={"keyword": "paracetamol", "enabledScrapers": {"apollo": False, "netmeds": False}, "timeouts": {"pharmeasy": 20}},
    )

    assert response.json()["pharmeasy"]["error"] == "pharmeasy timed out after 20ms"


@pytest.mark.parametrize("body", [{}, {"keyword": ""}, {"keyword": "   "}])
def test_search_without_keyword_is_rejected(client, body):
    response = client.post("/api/search", json=body)

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "Keyword must be a non-empty string"}


def test_search_with_unknown_source_is_rejected(client):
    response = client.post("/api/search", json={"keyword": "dolo", "enabledScrapers": {"medplus": True}})

    assert response.status_code == 400
    assert "medplus" in response.json()["error"]


def test_single_source_search(client):
    response = client.post("/api/search/netmeds", json={"keyword": "calpol"})

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "ok": True,
        "products": [{"name": "Calpol"}],
        "productsCount": 1,
    }


def test_single_source_search_unknown_source(client):
    response = client.post("/api/search/medplus", json={"keyword": "calpol"})

    assert response.status_code == 404


def test_browser_release_route(client, manager):
    client.post("/api/search/netmeds", json={"keyword": "calpol"})
    assert client.get("/api/browser").json() == {"browser": "ready"}

    response = client.post("/api/browser/release")

    assert response.json() == {"browser": "closed"}
    assert manager.state.value == "closed"


def test_ocr_requires_image(client):
    response = client.post("/api/ocr-prescription", json={})

    assert response.status_code == 400
    assert response.json()["error"] == "imageBase64 is required"


def test_ocr_returns_medicines(client):
    with patch(
        "medcompare.api.routes.prescription.prescription_reader.read_prescription",
        new=AsyncMock(return_value=["Dolo 650"]),
    ) as read:
        response = client.post(
            "/api/ocr-prescription",
            json={"imageBase64": "data:image/png;base64,AAAA", "mimeType": "image/png"},
        )

    assert response.status_code == 200
    assert response.json() == {"success": True, "medicines": ["Dolo 650"]}
    read.assert_awaited_once_with("data:image/png;base64,AAAA", "image/png")


def test_ocr_failure_is_server_error(client):
    with patch(
        "medcompare.api.routes.prescription.prescription_reader.read_prescription",
        new=AsyncMock(side_effect=PrescriptionReadError("Gemini API key not configured")),
    ):
        response = client.post("/api/ocr-prescription", json={"imageBase64": "AAAA"})

    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "Gemini API key not configured"}
