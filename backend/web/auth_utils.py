"""
Shared session-cookie utilities.

Why:
    The admin login sets the cookie and the logout clears it. Both must use the
    same flags, otherwise the browser keeps a stale cookie around.

Design:
    Pure helpers; callers pass the environment string (from the settings
    object) and the cookie name.
"""

from __future__ import annotations

from fastapi import Response


def cookie_opts(environment: str) -> dict:
    """Return hardened cookie flags (dev = prod).

    Returns a mapping with keys:
      - secure: True
      - samesite: "lax"  # the login form posts same-site, then redirects
    """
    return {"secure": True, "samesite": "lax"}


def set_session_cookie(response: Response, name: str, value: str, *, environment: str, max_age: int | None = None) -> None:
    opts = cookie_opts(environment)
    response.set_cookie(
        key=name,
        value=value,
        httponly=True,
        secure=opts["secure"],
        samesite=opts["samesite"],
        path="/",
        max_age=max_age,
    )


def clear_session_cookie(response: Response, name: str, *, environment: str) -> None:
    opts = cookie_opts(environment)
    response.delete_cookie(
        key=name,
        path="/",
        httponly=True,
        secure=opts["secure"],
        samesite=opts["samesite"],
    )


__all__ = ["cookie_opts", "set_session_cookie", "clear_session_cookie"]
