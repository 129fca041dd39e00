"""
Supabase-backed collaborator for registrations, auth and role grants.

This adapter implements BackendClientProtocol on top of a supabase client. It is
duck-typed so tests can pass a stub; the client is expected to expose:

- auth.sign_in_with_password({email, password}) -> { user, session }
- auth.set_session(access_token, refresh_token) -> { session } (refreshed if expired)
- auth.get_user(jwt) -> { user } | None
- auth.sign_out()
- table(name).select(...).eq(...).order(...).insert(...).execute() -> { data }

Tables:
- `inscricoes` (id, nome, whatsapp, created_at); RLS lets anonymous visitors
  insert and only admins select.
- `user_roles` (user_id, role); read-only from here.

Security:
- The client is created with the public anon key; every privileged read runs
  with the admin's own access token so RLS stays in charge.
- Exception details from the client are logged by class name only.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional
import logging

from identity_access.domain import AuthError, AuthTokens, Identity

from .domain import Registrant, StorageError

REGISTRANTS_TABLE = "inscricoes"
ROLES_TABLE = "user_roles"

logger = logging.getLogger("inscricoes.registration.supabase")


def _field(obj: Any, name: str) -> Any:
    """Read `name` from a response object or a plain dict (client versions differ)."""
    if obj is None:
        return None
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    text = str(value or "").strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def _row_to_registrant(row: Dict[str, Any]) -> Registrant:
    return Registrant(
        id=str(row.get("id", "")),
        name=str(row.get("nome", "")),
        phone=str(row.get("whatsapp", "")),
        created_at=_parse_timestamp(row.get("created_at")),
    )


class SupabaseBackend:
    """Per-request client bound to one visitor's tokens (or anonymous)."""

    def __init__(self, client_factory: Callable[[], Any], tokens: Optional[AuthTokens] = None):
        self._client_factory = client_factory
        self._tokens = tokens
        self._client: Any = None

    # --- Lifecycle ---------------------------------------------------------------

    def connect(self) -> None:
        try:
            self._client = self._client_factory()
        except Exception as exc:
            logger.warning("Supabase client creation failed: %s", exc.__class__.__name__)
            raise StorageError("backend_unavailable") from exc
        if self._tokens:
            try:
                res = self._client.auth.set_session(self._tokens.access_token, self._tokens.refresh_token or "")
            except Exception as exc:
                # Revoked tokens behave like "no session".
                logger.info("Stored session rejected by backend: %s", exc.__class__.__name__)
                self._tokens = None
                return
            # An expired access token is refreshed by set_session; adopt the new pair.
            session = _field(res, "session")
            access = _field(session, "access_token")
            if access and access != self._tokens.access_token:
                self._tokens = AuthTokens(
                    access_token=str(access),
                    refresh_token=_field(session, "refresh_token") or self._tokens.refresh_token,
                )
                logger.info("Backend session refreshed")

    def dispose(self) -> None:
        self._client = None

    def _require_client(self) -> Any:
        if self._client is None:
            raise RuntimeError("backend_not_connected")
        return self._client

    # --- Auth --------------------------------------------------------------------

    def get_current_identity(self) -> Optional[Identity]:
        client = self._require_client()
        if not self._tokens:
            return None
        try:
            res = client.auth.get_user(self._tokens.access_token)
        except Exception as exc:
            logger.info("get_user failed: %s", exc.__class__.__name__)
            return None
        user = _field(res, "user")
        user_id = _field(user, "id")
        if not user_id:
            return None
        return Identity(id=str(user_id), email=str(_field(user, "email") or ""))

    def sign_in(self, *, email: str, password: str) -> Identity:
        client = self._require_client()
        try:
            res = client.auth.sign_in_with_password({"email": email, "password": password})
        except Exception as exc:
            logger.warning("Sign-in rejected: %s", exc.__class__.__name__)
            raise AuthError("invalid_credentials", getattr(exc, "message", None) or str(exc)) from exc
        user = _field(res, "user")
        session = _field(res, "session")
        access = _field(session, "access_token")
        if not user or not access:
            raise AuthError("invalid_credentials")
        self._tokens = AuthTokens(access_token=str(access), refresh_token=_field(session, "refresh_token"))
        return Identity(id=str(_field(user, "id")), email=str(_field(user, "email") or email))

    def sign_out(self) -> None:
        client = self._require_client()
        try:
            client.auth.sign_out()
        except Exception as exc:
            # Local teardown still happens; the token simply expires server-side.
            logger.warning("Sign-out failed: %s", exc.__class__.__name__)
        self._tokens = None

    def has_role(self, identity: Identity, role: str) -> bool:
        client = self._require_client()
        try:
            res = (
                client.table(ROLES_TABLE)
                .select("role")
                .eq("user_id", identity.id)
                .eq("role", role)
                .execute()
            )
        except Exception as exc:
            logger.warning("Role lookup failed: %s", exc.__class__.__name__)
            return False
        rows = _field(res, "data") or []
        return len(rows) > 0

    def tokens(self) -> Optional[AuthTokens]:
        return self._tokens

    # --- Registrants -------------------------------------------------------------

    def insert_registrant(self, *, name: str, phone: str) -> Registrant:
        client = self._require_client()
        # Anonymous visitors may insert but not select, so ask for no representation.
        try:
            res = (
                client.table(REGISTRANTS_TABLE)
                .insert({"nome": name, "whatsapp": phone}, returning="minimal")
                .execute()
            )
        except Exception as exc:
            logger.warning("Registrant insert failed: %s", exc.__class__.__name__)
            raise StorageError("insert_failed") from exc
        rows = _field(res, "data") or []
        if rows:
            return _row_to_registrant(rows[0])
        return Registrant(id="", name=name, phone=phone, created_at=datetime.now(timezone.utc))

    def list_registrants(self) -> List[Registrant]:
        client = self._require_client()
        try:
            res = client.table(REGISTRANTS_TABLE).select("*").order("created_at", desc=True).execute()
        except Exception as exc:
            logger.warning("Registrant list failed: %s", exc.__class__.__name__)
            raise StorageError("list_failed") from exc
        rows = _field(res, "data") or []
        try:
            return [_row_to_registrant(row) for row in rows]
        except (TypeError, ValueError) as exc:
            logger.warning("Registrant rows malformed: %s", exc.__class__.__name__)
            raise StorageError("list_failed") from exc


__all__ = ["SupabaseBackend", "REGISTRANTS_TABLE", "ROLES_TABLE"]
