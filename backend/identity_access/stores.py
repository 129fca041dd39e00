"""
In-memory session store for the admin area.

Why: The browser only ever sees an opaque session id. The backend tokens that
identify the admin stay server-side and are handed to a fresh backend client
on every guarded request. Nothing here is durable: a restart signs everybody
out, which is acceptable for a single-event admin panel.

Security: Cookies carry only an opaque session id. Tokens never reach templates.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional
import secrets
import time

from .domain import AuthTokens


def _now() -> int:
    return int(time.time())


@dataclass
class SessionRecord:
    session_id: str
    tokens: AuthTokens
    email: str
    expires_at: Optional[int] = None
    ttl_seconds: int = 3600


class SessionStore:
    def __init__(self):
        self._data: Dict[str, SessionRecord] = {}

    def create(self, *, tokens: AuthTokens, email: str = "", ttl_seconds: int = 3600) -> SessionRecord:
        sid = secrets.token_urlsafe(24)
        rec = SessionRecord(
            session_id=sid,
            tokens=tokens,
            email=email,
            expires_at=_now() + ttl_seconds,
            ttl_seconds=ttl_seconds,
        )
        self._data[sid] = rec
        return rec

    def get(self, session_id: str) -> Optional[SessionRecord]:
        rec = self._data.get(session_id)
        if not rec:
            return None
        if rec.expires_at and rec.expires_at < _now():
            self._data.pop(session_id, None)
            return None
        return rec

    def update_tokens(self, session_id: str, tokens: AuthTokens) -> None:
        """Replace the tokens of a live session (after a backend refresh); expiry is unchanged."""
        rec = self.get(session_id)
        if rec is not None:
            rec.tokens = tokens

    def delete(self, session_id: str) -> None:
        self._data.pop(session_id, None)


__all__ = ["SessionRecord", "SessionStore"]
