"""Backend collaborator interface plus an in-memory implementation.

Why:
    Storage, authentication and role grants live in an external service. The
    domain code talks to it only through `BackendClientProtocol`, built per
    request by a factory and bound to that visitor's tokens. Tests and local
    development use the in-memory implementation; production wires the
    Supabase adapter (see `backend_supabase.py`).

Lifecycle:
    factory(tokens) -> client; client.connect(); ...; client.dispose().
    `backend_session()` wraps that sequence for async callers.
"""
from __future__ import annotations

import asyncio
import secrets
import threading
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import AsyncIterator, Callable, Dict, List, Optional, Protocol, Set
from uuid import uuid4

from identity_access.domain import ADMIN_ROLE, AuthError, AuthTokens, Identity

from .domain import Registrant, StorageError


class BackendClientProtocol(Protocol):
    """Operations the application consumes from the hosted backend."""

    def connect(self) -> None: ...

    def dispose(self) -> None: ...

    def get_current_identity(self) -> Optional[Identity]: ...

    def sign_in(self, *, email: str, password: str) -> Identity: ...

    def sign_out(self) -> None: ...

    def has_role(self, identity: Identity, role: str) -> bool: ...

    def insert_registrant(self, *, name: str, phone: str) -> Registrant: ...

    def list_registrants(self) -> List[Registrant]: ...

    def tokens(self) -> Optional[AuthTokens]: ...


BackendFactory = Callable[[Optional[AuthTokens]], BackendClientProtocol]


@asynccontextmanager
async def backend_session(factory: BackendFactory, tokens: Optional[AuthTokens] = None) -> AsyncIterator[BackendClientProtocol]:
    """Yield a connected client and always dispose it afterwards."""
    client = factory(tokens)
    await asyncio.to_thread(client.connect)
    try:
        yield client
    finally:
        await asyncio.to_thread(client.dispose)


# --- In-memory implementation -----------------------------------------------------


@dataclass
class _User:
    id: str
    email: str
    password: str


@dataclass
class InMemoryBackendStore:
    """Shared state behind every `InMemoryBackend` client.

    Mirrors the hosted backend closely enough for tests: password sign-in
    issues tokens, role grants live in a separate relation, and only admins
    can read the registrant table (row-level security returns no rows for
    everybody else, like the real service does).
    """

    users: Dict[str, _User] = field(default_factory=dict)
    grants: Dict[str, Set[str]] = field(default_factory=dict)
    registrants: List[Registrant] = field(default_factory=list)
    access_tokens: Dict[str, str] = field(default_factory=dict)
    lock: threading.Lock = field(default_factory=threading.Lock)

    def add_user(self, *, email: str, password: str, roles: tuple[str, ...] = ()) -> Identity:
        key = email.strip().lower()
        with self.lock:
            user = self.users.get(key)
            if user is None:
                user = _User(id=str(uuid4()), email=key, password=password)
                self.users[key] = user
            else:
                user.password = password
            self.grants.setdefault(user.id, set()).update(roles)
        return Identity(id=user.id, email=user.email)

    def revoke_role(self, user_id: str, role: str) -> None:
        with self.lock:
            self.grants.get(user_id, set()).discard(role)

    def add_registrant(self, *, name: str, phone: str, created_at: datetime | None = None) -> Registrant:
        rec = Registrant(
            id=str(uuid4()),
            name=name,
            phone=phone,
            created_at=created_at or datetime.now(timezone.utc),
        )
        with self.lock:
            self.registrants.append(rec)
        return rec

    def factory(self) -> BackendFactory:
        def _build(tokens: Optional[AuthTokens]) -> BackendClientProtocol:
            return InMemoryBackend(self, tokens)

        return _build


class InMemoryBackend:
    """Per-request client over an `InMemoryBackendStore`."""

    def __init__(self, store: InMemoryBackendStore, tokens: Optional[AuthTokens] = None) -> None:
        self._store = store
        self._tokens = tokens
        self._connected = False

    def connect(self) -> None:
        self._connected = True

    def dispose(self) -> None:
        self._connected = False

    def _require_connected(self) -> None:
        if not self._connected:
            raise RuntimeError("backend_not_connected")

    def get_current_identity(self) -> Optional[Identity]:
        self._require_connected()
        if not self._tokens:
            return None
        with self._store.lock:
            user_id = self._store.access_tokens.get(self._tokens.access_token)
            if not user_id:
                return None
            for user in self._store.users.values():
                if user.id == user_id:
                    return Identity(id=user.id, email=user.email)
        return None

    def sign_in(self, *, email: str, password: str) -> Identity:
        self._require_connected()
        key = (email or "").strip().lower()
        with self._store.lock:
            user = self._store.users.get(key)
            if user is None or not secrets.compare_digest(user.password, password or ""):
                raise AuthError("invalid_credentials", "Invalid login credentials")
            access = secrets.token_urlsafe(24)
            self._store.access_tokens[access] = user.id
        self._tokens = AuthTokens(access_token=access, refresh_token=secrets.token_urlsafe(24))
        return Identity(id=user.id, email=user.email)

    def sign_out(self) -> None:
        self._require_connected()
        if self._tokens:
            with self._store.lock:
                self._store.access_tokens.pop(self._tokens.access_token, None)
        self._tokens = None

    def has_role(self, identity: Identity, role: str) -> bool:
        self._require_connected()
        with self._store.lock:
            return role in self._store.grants.get(identity.id, set())

    def insert_registrant(self, *, name: str, phone: str) -> Registrant:
        self._require_connected()
        return self._store.add_registrant(name=name, phone=phone)

    def list_registrants(self) -> List[Registrant]:
        self._require_connected()
        identity = self.get_current_identity()
        if identity is None or not self.has_role(identity, ADMIN_ROLE):
            return []
        with self._store.lock:
            rows = list(self._store.registrants)
        return sorted(rows, key=lambda r: r.created_at, reverse=True)

    def tokens(self) -> Optional[AuthTokens]:
        return self._tokens


class NullBackend:
    """Fallback client that signals the backend is not configured."""

    def __init__(self, tokens: Optional[AuthTokens] = None) -> None:
        self._tokens = tokens

    def connect(self) -> None:
        return None

    def dispose(self) -> None:
        return None

    def get_current_identity(self) -> Optional[Identity]:
        return None

    def sign_in(self, *, email: str, password: str) -> Identity:
        raise AuthError("backend_not_configured", "Serviço indisponível")

    def sign_out(self) -> None:
        return None

    def has_role(self, identity: Identity, role: str) -> bool:
        return False

    def insert_registrant(self, *, name: str, phone: str) -> Registrant:
        raise StorageError("backend_not_configured")

    def list_registrants(self) -> List[Registrant]:
        raise StorageError("backend_not_configured")

    def tokens(self) -> Optional[AuthTokens]:
        return self._tokens


__all__ = [
    "BackendClientProtocol",
    "BackendFactory",
    "backend_session",
    "InMemoryBackendStore",
    "InMemoryBackend",
    "NullBackend",
]
