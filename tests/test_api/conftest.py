"""FastAPI test client fixtures."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from nichescout.api.app import include_routes
from nichescout.api.middleware import CorrelationIdMiddleware, add_exception_handlers
from nichescout.service import ResearchService

if TYPE_CHECKING:
    from stubs import ScriptedLLM

    from nichescout.config import Settings
    from nichescout.db import KeyValueStore


def _create_test_app(service: ResearchService) -> FastAPI:
    """Create a FastAPI app with an injected service (no lifespan)."""
    app = FastAPI(title="NicheScout Test")

    app.state.store = service.store
    app.state.settings = service.settings
    app.state.service = service

    app.add_middleware(CorrelationIdMiddleware)
    add_exception_handlers(app)
    include_routes(app)
    return app


@pytest.fixture()
def service(store: KeyValueStore, settings: Settings, scripted_llm: ScriptedLLM) -> ResearchService:
    return ResearchService(store, settings, llm=scripted_llm)


@pytest.fixture()
def client(service: ResearchService) -> TestClient:
    return TestClient(_create_test_app(service))


@pytest.fixture()
def signed_in_client(client: TestClient) -> TestClient:
    resp = client.post(
        "/api/v1/auth/login", json={"email": "test@example.com", "password": "password"}
    )
    assert resp.status_code == 200
    return client
