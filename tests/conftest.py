"""
Shared pytest fixtures for notebridge tests.

This module provides:
- ``settings``: isolated settings (in-memory SQLite, temp file storage)
- ``db_session``: a session on a private in-memory database, for service tests
- ``watsonx_stub``: an ``httpx.MockTransport`` that plays IAM and WatsonX
- ``client``: a ``TestClient`` over a fully wired app, lifespan included
- ``register``: sign up a clinician and get back tokens plus auth headers

Usage::

    def test_something(client, auth_headers):
        resp = client.get("/cases", headers=auth_headers)
"""

from __future__ import annotations

import json
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from notebridge.ai.watsonx import WatsonxClient
from notebridge.api import create_app
from notebridge.api.deps import get_watsonx_client
from notebridge.core.database import create_schema, reset_engine
from notebridge.core.orm.session import create_notebridge_engine, session_factory
from notebridge.core.settings import NotebridgeSettings

TEST_SECRET = "test-access-secret-0123456789abcdef"
TEST_PASSWORD = "s3cure-passw0rd"


# =============================================================================
# Settings and database
# =============================================================================


@pytest.fixture
def settings(tmp_path: Path) -> NotebridgeSettings:
    """Settings that never touch the developer's .env or database."""
    return NotebridgeSettings(
        _env_file=None,
        jwt_access_secret=TEST_SECRET,
        database_url="sqlite://",
        bcrypt_rounds=4,
        file_storage_dir=str(tmp_path / "storage"),
        watsonx_api_key="test-api-key",
        watsonx_project_id="test-project",
        log_level="WARNING",
        log_format="console",
    )


@pytest.fixture
def db_session() -> Generator[Session, None, None]:
    """Session on a private in-memory database with every table created."""
    engine = create_notebridge_engine("sqlite://")
    create_schema(engine)
    session = session_factory(engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


# =============================================================================
# WatsonX
# =============================================================================


class WatsonxStub:
    """Scripted IAM + chat endpoints behind ``httpx.MockTransport``.

    Queue chat answers on ``replies``: a string becomes the first choice's
    content, an ``httpx.Response`` is returned as-is.
    """

    def __init__(self) -> None:
        self.replies: list[str | httpx.Response] = []
        self.requests: list[httpx.Request] = []
        self.token_calls = 0
        self.token_expires_in = 3600

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path.endswith("/identity/token"):
            self.token_calls += 1
            return httpx.Response(
                200,
                json={"access_token": f"iam-token-{self.token_calls}", "expires_in": self.token_expires_in},
            )
        if not self.replies:
            return httpx.Response(500, text="no reply scripted")
        reply = self.replies.pop(0)
        if isinstance(reply, httpx.Response):
            return reply
        return httpx.Response(200, json={"choices": [{"message": {"content": reply}}]})

    def client(self, settings: NotebridgeSettings) -> WatsonxClient:
        return WatsonxClient.from_settings(settings, transport=httpx.MockTransport(self.handler))

    @property
    def chat_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith("/text/chat")]

    def chat_bodies(self) -> list[dict[str, Any]]:
        return [json.loads(r.content) for r in self.chat_requests]


@pytest.fixture
def watsonx_stub() -> WatsonxStub:
    return WatsonxStub()


@pytest.fixture
def valid_document() -> dict[str, str]:
    """Seven English sections that pass every validation rule."""
    return {
        "section_1_what_i_have": "You have high blood pressure, which means your heart works harder than it should.",
        "section_2_how_to_live": "Eat less salt, stay active for thirty minutes a day and keep a regular sleep routine.",
        "section_3_timeline": "Over the next weeks your blood pressure should settle as the treatment starts to work.",
        "section_4_life_impact": "Most people keep working and travelling normally once their blood pressure is controlled.",
        "section_5_medications": "Take one lisinopril 10 mg tablet every morning with water, even when you feel well.",
        "section_6_warnings": "Call 112 for an ambulance if you get chest pain, sudden weakness or trouble speaking.",
        "section_7_contacts": "Book a follow-up appointment at the clinic in four weeks or phone your family doctor.",
    }


# =============================================================================
# Application
# =============================================================================


@pytest.fixture
def app(settings: NotebridgeSettings, watsonx_stub: WatsonxStub) -> Generator[FastAPI, None, None]:
    """Fully wired app with WatsonX routed to ``watsonx_stub``."""
    reset_engine()
    application = create_app(settings)
    stub_client = watsonx_stub.client(settings)
    application.dependency_overrides[get_watsonx_client] = lambda: stub_client
    yield application
    stub_client.close()
    reset_engine()


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c


@pytest.fixture
def register(client: TestClient) -> Callable[..., dict[str, Any]]:
    """Factory: sign up a clinician, return the token response plus ``headers``."""

    def _register(
        email: str = "dr.tamm@example.com",
        password: str = TEST_PASSWORD,
        **extra: Any,
    ) -> dict[str, Any]:
        resp = client.post("/auth/signup", json={"email": email, "password": password, **extra})
        assert resp.status_code == 201, resp.text
        body = resp.json()
        body["headers"] = {"Authorization": f"Bearer {body['accessToken']}"}
        return body

    return _register


@pytest.fixture
def auth_headers(register: Callable[..., dict[str, Any]]) -> dict[str, str]:
    return register()["headers"]


@pytest.fixture
def approved_case(client: TestClient, auth_headers: dict[str, str]) -> dict[str, Any]:
    """A case that has gone through analysis and clinician approval."""
    case = client.post(
        "/cases",
        json={"technicalNote": "Essential hypertension, start lisinopril 10 mg."},
        headers=auth_headers,
    ).json()
    client.post(
        f"/cases/{case['id']}/analysis",
        json={"aiDraftText": "draft", "modelUsed": "ibm/granite-4-h-small"},
        headers=auth_headers,
    )
    resp = client.post(
        f"/cases/{case['id']}/approval",
        json={"approvedText": "Reviewed and approved."},
        headers=auth_headers,
    )
    assert resp.status_code == 200, resp.text
    return case
