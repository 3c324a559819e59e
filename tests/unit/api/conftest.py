"""Fixtures for API unit tests: in-memory collaborators, AsyncClient, signed-up accounts."""

import pytest
from httpx import ASGITransport, AsyncClient

from laundry_app.api import dependencies
from laundry_app.application.document_store import USERS_COLLECTION
from laundry_app.application.session import SessionRegistry
from laundry_app.audit.logger import drain_pending_writes
from laundry_app.domain.models.credential import SECURITY_QUESTIONS
from laundry_app.infrastructure.cache.recovery_store_memory import InMemoryRecoverySessionStore
from laundry_app.main import app

PASSWORD = "Passw0rdOk"
QUESTION = SECURITY_QUESTIONS[2]


@pytest.fixture
def session_registry():
    return SessionRegistry()


@pytest.fixture
def app_with_overrides(document_store, identity_provider, audit_repository, session_registry):
    """App with document store, identity provider, audit sink and session state overridden for testing."""
    recovery_sessions = InMemoryRecoverySessionStore()
    app.dependency_overrides[dependencies.get_document_store] = lambda: document_store
    app.dependency_overrides[dependencies.get_identity_provider] = lambda: identity_provider
    app.dependency_overrides[dependencies.get_audit_repository] = lambda: audit_repository
    app.dependency_overrides[dependencies.get_session_registry] = lambda: session_registry
    app.dependency_overrides[dependencies.get_recovery_session_store] = lambda: recovery_sessions
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def drain_audit():
    """Wait for audit entries the app scheduled in the background."""

    async def _drain():
        await drain_pending_writes(dependencies.audit_writes)

    return _drain


@pytest.fixture
async def async_client(app_with_overrides):
    """Async HTTP client for testing; uses overridden app."""
    transport = ASGITransport(app=app_with_overrides)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def sign_up(async_client, document_store):
    """Create an account through the API and return (token, uid). role updates the stored record."""

    async def _sign_up(email: str, name: str = "Ann Lee", answer: str = "Rex", role: str = "Customer"):
        r = await async_client.post(
            "/auth/signup",
            json={
                "email": email,
                "password": PASSWORD,
                "display_name": name,
                "security_question": QUESTION,
                "security_answer": answer,
            },
        )
        assert r.status_code == 201, r.text
        data = r.json()
        uid = data["profile"]["uid"]
        if role != "Customer":
            await document_store.update(USERS_COLLECTION, uid, {"role": role})
        return data["token"], uid

    return _sign_up


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers():
    return bearer
