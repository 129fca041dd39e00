"""
Wiring of the backend collaborator (Supabase or in-memory).

Why:
    Routes never hold a client handle. They ask this module for the current
    factory and build a fresh collaborator per request, bound to the visitor's
    tokens. Startup decides which factory that is; tests swap it out with
    `set_backend_factory`.

Security:
    Only the public anon key is used. Row-level security in Supabase decides
    what an anonymous visitor or a signed-in admin may read or write.
"""
from __future__ import annotations

import logging
import os
from typing import Optional

from registration.backend import BackendFactory, InMemoryBackendStore, NullBackend
from registration.backend_supabase import SupabaseBackend

import config as _config

logger = logging.getLogger("inscricoes.web")

_FACTORY: Optional[BackendFactory] = None
_MEMORY_STORE: Optional[InMemoryBackendStore] = None


def set_backend_factory(factory: Optional[BackendFactory]) -> None:
    """Install a factory (tests) or reset to unwired with None."""
    global _FACTORY
    _FACTORY = factory


def get_backend_factory() -> BackendFactory:
    """Return the wired factory, or one that builds `NullBackend` clients."""
    if _FACTORY is None:
        return NullBackend
    return _FACTORY


def memory_store() -> Optional[InMemoryBackendStore]:
    return _MEMORY_STORE


def _supabase_client_factory(url: str, key: str):
    # Imported lazily so the in-memory setup works without network libraries.
    from supabase import ClientOptions, create_client

    def _build():
        # One client per request; the server keeps tokens, not the client.
        return create_client(
            url,
            key,
            options=ClientOptions(persist_session=False, auto_refresh_token=False),
        )

    return _build


def wire_memory_backend(store: Optional[InMemoryBackendStore] = None) -> InMemoryBackendStore:
    """Wire the in-memory collaborator and seed the dev admin when configured."""
    global _MEMORY_STORE
    store = store or InMemoryBackendStore()
    email = (os.getenv("DEV_ADMIN_EMAIL") or "").strip()
    password = os.getenv("DEV_ADMIN_PASSWORD") or ""
    if email and password:
        store.add_user(email=email, password=password, roles=("admin",))
        logger.info("Dev admin seeded into in-memory backend")
    _MEMORY_STORE = store
    set_backend_factory(store.factory())
    return store


def wire_backend_from_env() -> str:
    """Select and wire the collaborator from the environment.

    Behavior:
        - Returns "supabase", "memory" or "null" (Supabase selected but
          unusable; every backend call then fails with a storage/auth error).
        - Safe to call repeatedly; the last call wins.

    Logging:
        - Info on success, warning with the exception class on failure.
    """
    backend = _config.selected_backend()
    if backend == "memory":
        wire_memory_backend()
        logger.info("Backend wired: memory")
        return "memory"

    url = (os.getenv("SUPABASE_URL") or "").strip()
    key = (os.getenv("SUPABASE_ANON_KEY") or "").strip()
    if not url or not key:
        logger.warning("Backend not wired: SUPABASE_URL/SUPABASE_ANON_KEY missing")
        set_backend_factory(None)
        return "null"
    try:
        client_factory = _supabase_client_factory(url, key)
    except ImportError as exc:
        logger.warning("Backend not wired: %s", exc.__class__.__name__)
        set_backend_factory(None)
        return "null"

    def _factory(tokens):
        return SupabaseBackend(client_factory, tokens)

    set_backend_factory(_factory)
    logger.info("Backend wired: Supabase")
    return "supabase"


__all__ = [
    "set_backend_factory",
    "get_backend_factory",
    "memory_store",
    "wire_memory_backend",
    "wire_backend_from_env",
]
