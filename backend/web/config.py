"""
Configuration and startup security checks for the registration site.

Why: The admin panel exposes names and phone numbers. A production deploy that
silently falls back to the in-memory backend or ships the dev admin seed would
lose registrations or open a back door. This module refuses to start in that
case while keeping local development permissive.

Permissions: The caller needs no special privileges. Functions only read
environment variables; `ensure_secure_config_on_startup` raises `SystemExit` on
fatal misconfiguration.
"""
from __future__ import annotations

import os
from urllib.parse import urlparse

DEFAULT_SESSION_TTL_SECONDS = 3600
_PLACEHOLDERS = ("CHANGE_ME", "DUMMY", "YOUR_", "<")


def _is_prod_like(env: str) -> bool:
    env_l = (env or "").lower()
    return env_l in {"prod", "production", "stage", "staging"}


def current_environment() -> str:
    return (os.getenv("INSCRICOES_ENV", "dev") or "dev").strip().lower()


def _is_placeholder(value: str) -> bool:
    upper = value.strip().upper()
    return not upper or any(upper.startswith(p) for p in _PLACEHOLDERS)


def selected_backend() -> str:
    """Return "supabase" or "memory".

    An explicit BACKEND wins. Otherwise Supabase is used as soon as both the
    URL and the anon key are present.
    """
    explicit = (os.getenv("BACKEND") or "").strip().lower()
    if explicit in {"supabase", "memory"}:
        return explicit
    url = (os.getenv("SUPABASE_URL") or "").strip()
    key = (os.getenv("SUPABASE_ANON_KEY") or "").strip()
    return "supabase" if url and key else "memory"


def session_ttl_seconds() -> int:
    raw = (os.getenv("SESSION_TTL_SECONDS") or "").strip()
    try:
        value = int(raw)
    except ValueError:
        return DEFAULT_SESSION_TTL_SECONDS
    return value if value > 0 else DEFAULT_SESSION_TTL_SECONDS


def ensure_secure_config_on_startup() -> None:
    """Fail fast on insecure production configuration.

    Checks (prod/stage only):
    - SUPABASE_URL and SUPABASE_ANON_KEY are set and not placeholders.
    - SUPABASE_URL uses https.
    - The in-memory backend is not selected.
    - No dev admin seed credentials are present.
    """
    if not _is_prod_like(current_environment()):
        return  # dev/test remain permissive

    url = (os.getenv("SUPABASE_URL") or "").strip()
    key = (os.getenv("SUPABASE_ANON_KEY") or "").strip()
    if _is_placeholder(url):
        raise SystemExit("Refusing to start: SUPABASE_URL is unset or a placeholder in production.")
    if _is_placeholder(key):
        raise SystemExit("Refusing to start: SUPABASE_ANON_KEY is unset or a placeholder in production.")

    if (urlparse(url).scheme or "").lower() != "https":
        raise SystemExit("Refusing to start: SUPABASE_URL must use https in production.")

    if selected_backend() == "memory":
        raise SystemExit(
            "Refusing to start: BACKEND=memory is not allowed in production/staging. Configure Supabase."
        )

    if (os.getenv("DEV_ADMIN_EMAIL") or "").strip() or (os.getenv("DEV_ADMIN_PASSWORD") or "").strip():
        raise SystemExit(
            "Refusing to start: DEV_ADMIN_EMAIL/DEV_ADMIN_PASSWORD must not be set in production/staging."
        )


__all__ = [
    "ensure_secure_config_on_startup",
    "current_environment",
    "selected_backend",
    "session_ttl_seconds",
]
