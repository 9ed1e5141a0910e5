"""Unit tests for template routes."""

from unittest.mock import MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from sprintlens.api.app import create_app
from sprintlens.api.dependencies import get_orchestrator
from sprintlens.config import Settings
from sprintlens.orchestrator import (
    DEFAULT_TEMPLATE_NAME,
    InvalidTemplateConfigError,
    ReportOrchestrator,
)
from sprintlens.state_store import StateStore


@pytest.fixture
def store():
    """Create an in-memory StateStore."""
    s = StateStore(":memory:")
    yield s
    s.close()


@pytest.fixture
def app(store: StateStore):
    """Create a test FastAPI app with an in-memory orchestrator."""
    app = create_app(settings=Settings(db_path=":memory:"))
    orchestrator = ReportOrchestrator(state_store=store)

    def override_get_orchestrator():
        yield orchestrator

    app.dependency_overrides[get_orchestrator] = override_get_orchestrator
    return app


@pytest.fixture
def client(app: FastAPI):
    """Create a test client."""
    with TestClient(app, raise_server_exceptions=False) as client:
        yield client


@pytest.mark.unit
class TestListTemplates:
    """Tests for GET /api/v1/templates."""

    def test_seeds_default(self, client: TestClient) -> None:
        """A new org sees the default template."""
        response = client.get("/api/v1/templates", params={"org_id": "org-1"})

        assert response.status_code == 200
        data = response.json()["data"]
        assert [t["name"] for t in data] == [DEFAULT_TEMPLATE_NAME]
        assert data[0]["kind"] == "sprint_summary"
        assert data[0]["config"]["sections"]["burndown"] is True
        assert response.json()["error"] is None

    def test_org_id_required(self, client: TestClient) -> None:
        """org_id is a required query parameter."""
        response = client.get("/api/v1/templates")

        assert response.status_code == 422


@pytest.mark.unit
class TestUpsertTemplate:
    """Tests for POST /api/v1/templates."""

    def test_create(self, client: TestClient) -> None:
        """Posting without an id creates a template."""
        response = client.post(
            "/api/v1/templates",
            json={"org_id": "org-1", "name": "Exec view", "config": {"risk_threshold_pct": 75}},
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["id"]
        assert data["name"] == "Exec view"
        assert data["config"] == {"risk_threshold_pct": 75}
        assert data["format"] == "html"

    def test_update(self, client: TestClient) -> None:
        """Posting with an id updates that template."""
        created = client.post(
            "/api/v1/templates", json={"org_id": "org-1", "name": "Exec view"}
        ).json()["data"]

        response = client.post(
            "/api/v1/templates",
            json={"org_id": "org-1", "id": created["id"], "name": "Exec view v2", "active": False},
        )

        assert response.status_code == 201
        assert response.json()["data"]["id"] == created["id"]
        assert response.json()["data"]["name"] == "Exec view v2"
        assert response.json()["data"]["active"] is False

    def test_update_unknown(self, client: TestClient) -> None:
        """Unknown ids are reported as not found."""
        response = client.post(
            "/api/v1/templates", json={"org_id": "org-1", "id": "missing", "name": "x"}
        )

        assert response.status_code == 404
        assert response.json() == {"data": None, "error": "Template not found"}

    def test_validation(self, client: TestClient) -> None:
        """Empty names and unknown formats are rejected."""
        for body in ({"name": ""}, {"name": "x", "format": "docx"}):
            response = client.post("/api/v1/templates", json={"org_id": "org-1", **body})
            assert response.status_code == 422

    @pytest.mark.parametrize(
        "config",
        [
            {"risk_threshold_pct": 150},
            {"risk_threshold_pct": "sixty"},
            {"sections": []},
            {"sections": {"burndown": "maybe"}},
            {"sections": {"burndown": None}},
        ],
    )
    def test_invalid_config(self, client: TestClient, store: StateStore, config: dict) -> None:
        """Malformed template configs are rejected at write time."""
        response = client.post(
            "/api/v1/templates", json={"org_id": "org-1", "name": "Broken", "config": config}
        )

        assert response.status_code == 422
        assert store.list_templates("org-1", active_only=False) == []

    def test_config_stores_only_sent_keys(self, client: TestClient) -> None:
        """Unknown config keys are dropped and unset toggles are not filled in."""
        response = client.post(
            "/api/v1/templates",
            json={
                "org_id": "org-1",
                "name": "Lean",
                "config": {"sections": {"burndown": False}, "theme": "dark"},
            },
        )

        assert response.status_code == 201
        assert response.json()["data"]["config"] == {"sections": {"burndown": False}}


@pytest.mark.unit
class TestInvalidConfigHandler:
    """Tests for the InvalidTemplateConfigError handler."""

    def test_orchestrator_rejection_is_422(self, app: FastAPI) -> None:
        """A config rejected by the orchestrator maps to 422 with its message."""
        orchestrator = MagicMock()
        orchestrator.upsert_template.side_effect = InvalidTemplateConfigError(
            "'sections' must be an object"
        )

        def override_get_orchestrator():
            yield orchestrator

        app.dependency_overrides[get_orchestrator] = override_get_orchestrator
        with TestClient(app, raise_server_exceptions=False) as client:
            response = client.post("/api/v1/templates", json={"org_id": "org-1", "name": "x"})

        assert response.status_code == 422
        assert response.json() == {"data": None, "error": "'sections' must be an object"}
