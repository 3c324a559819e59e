"""Application lifespan: the session registry is created at startup and closed at shutdown."""

from fastapi.testclient import TestClient

from laundry_app.application.identity_provider import Identity
from laundry_app.application.session import SessionRegistry
from laundry_app.main import app


def test_lifespan_owns_session_registry():
    with TestClient(app) as client:
        registry = app.state.session_registry
        assert isinstance(registry, SessionRegistry)
        registry.open(Identity(uid="uid-1", email="a@b.io", id_token="t1"))

        # Unauthenticated requests resolve the registry from app state and still get 401.
        r = client.get("/auth/me")
        assert r.status_code == 401
        assert len(registry) == 1

    assert len(registry) == 0
