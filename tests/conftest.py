import os

# Pas de Redis pendant les tests: le lifespan désactive le rate limiting
os.environ.setdefault("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS", "1")

import pytest
from typing import Generator, Dict, Any
from fastapi.testclient import TestClient

from pixoul.app_setup.factory import create_app
from pixoul.utils.security import get_identity
from tests.fakes import FakeSupabase, FakeStripe, TEST_USER

# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "tests/unit/" in nodeid:
            item.add_marker(pytest.mark.unit)
        elif "tests/integration/" in nodeid:
            item.add_marker(pytest.mark.integration)

@pytest.fixture()
def app():
    return create_app(demo_mode=False)

@pytest.fixture()
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c

# Base en mémoire à la place de Supabase pour tous les tests
@pytest.fixture(autouse=True)
def fake_db(monkeypatch) -> FakeSupabase:
    db = FakeSupabase()
    monkeypatch.setattr("pixoul.infra.supabase_client.get_supabase", lambda: db)
    monkeypatch.setattr("pixoul.infra.supabase_client.get_service_supabase", lambda: db)
    return db

# Simuler un utilisateur authentifié pour les endpoints protégés
@pytest.fixture(autouse=True)
def identity(app):
    """Identité injectée; `identity["current"] = ...` pour changer d'utilisateur."""
    holder: Dict[str, Any] = {"current": TEST_USER}
    app.dependency_overrides[get_identity] = lambda: holder["current"]
    try:
        yield holder
    finally:
        app.dependency_overrides.pop(get_identity, None)

@pytest.fixture()
def fake_stripe(monkeypatch) -> FakeStripe:
    fs = FakeStripe()
    for name in ("find_or_create_customer", "create_session", "get_session", "retrieve_payment_method", "detach_payment_method"):
        monkeypatch.setattr(f"pixoul.payments.stripe_client.{name}", getattr(fs, name))
    return fs
