"""
Pytest configuration for backend tests.

Why: Force AnyIO to use the asyncio backend, make `backend/` and `backend/web`
importable with the same flat module names the app uses, and give every test
a fresh in-memory backend and session store.
"""
import os
import sys
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).resolve().parents[2]
BACKEND_DIR = REPO_ROOT / "backend"
WEB_DIR = BACKEND_DIR / "web"
TESTS_DIR = BACKEND_DIR / "tests"
for p in (str(BACKEND_DIR), str(WEB_DIR), str(TESTS_DIR)):
    if p not in sys.path:
        sys.path.insert(0, p)

# Import-time wiring must pick the in-memory backend, whatever the shell says.
os.environ["BACKEND"] = "memory"
for _var in ("INSCRICOES_ENV", "DEV_ADMIN_EMAIL", "DEV_ADMIN_PASSWORD"):
    os.environ.pop(_var, None)


ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "s3cret-admin"
MEMBER_EMAIL = "member@example.com"
MEMBER_PASSWORD = "s3cret-member"


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def _clear_env_toggles(monkeypatch: pytest.MonkeyPatch):
    """Keep env-driven toggles from leaking across tests."""
    for var in ("INSCRICOES_ENV", "INSCRICOES_TRUST_PROXY", "DEV_ADMIN_EMAIL", "DEV_ADMIN_PASSWORD"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("DISPLAY_TIMEZONE", "America/Sao_Paulo")
    yield


@pytest.fixture
def memory_store():
    """Fresh in-memory backend wired into the app, with one admin and one member."""
    import backend_wiring  # type: ignore
    from registration.backend import InMemoryBackendStore

    store = InMemoryBackendStore()
    store.add_user(email=ADMIN_EMAIL, password=ADMIN_PASSWORD, roles=("admin",))
    store.add_user(email=MEMBER_EMAIL, password=MEMBER_PASSWORD)
    backend_wiring.set_backend_factory(store.factory())
    yield store
    backend_wiring.set_backend_factory(None)


@pytest.fixture(autouse=True)
def _reset_session_store(monkeypatch: pytest.MonkeyPatch):
    """Give every test an empty SESSION_STORE on the app module."""
    try:
        import main  # type: ignore
        from identity_access.stores import SessionStore
    except ImportError:
        yield
        return
    monkeypatch.setattr(main, "SESSION_STORE", SessionStore(), raising=False)
    main.SETTINGS.override_environment(None)
    yield
    main.SETTINGS.override_environment(None)
