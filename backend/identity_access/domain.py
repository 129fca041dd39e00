"""
Identity domain constants, value objects and auth errors.

Why:
- Centralize the single role label the admin area relies on so the guard,
  the collaborators and the tests never drift apart.
- Keep the identity shape minimal: the backend owns users and grants; the web
  layer only needs an opaque id and the e-mail for display.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

# Presence of this grant is the sole authorization signal for /admin.
ADMIN_ROLE = "admin"


@dataclass(frozen=True)
class Identity:
    id: str
    email: str = ""


@dataclass(frozen=True)
class AuthTokens:
    """Opaque tokens issued by the backend after a password sign-in."""

    access_token: str
    refresh_token: Optional[str] = None


class AuthError(Exception):
    """Authentication failed or the caller lacks the required grant.

    `code` is a short, stable identifier safe for logs; `message` may come from
    the backend and is only ever shown to the person who typed the password.
    """

    def __init__(self, code: str, message: str | None = None) -> None:
        super().__init__(code)
        self.code = code
        self.message = message or code


class AccessDenied(AuthError):
    """Raised by the session guard; callers redirect to the login page."""


__all__ = ["ADMIN_ROLE", "Identity", "AuthTokens", "AuthError", "AccessDenied"]
