"""
Session guard for the admin area.

Why:
    Every admin page load must establish who is asking and whether they hold
    the "admin" grant before a single registrant row is fetched. The guard
    queries the backend each time; it keeps no state of its own.

Ordering:
    identity check -> role check -> (caller may fetch data). Each backend call
    is awaited before the next step starts.
"""

from __future__ import annotations

import asyncio
import logging

from .domain import ADMIN_ROLE, AccessDenied, AuthError, Identity

LOGIN_PATH = "/admin-login"

logger = logging.getLogger("inscricoes.identity_access")


class SessionGuard:
    def __init__(self, backend, *, role: str = ADMIN_ROLE) -> None:
        # backend: registration.backend.BackendClientProtocol (connected)
        self._backend = backend
        self._role = role

    async def require_admin(self) -> Identity:
        """Return the admin identity or raise `AccessDenied`.

        Callers redirect to `LOGIN_PATH` on `AccessDenied`.
        """
        identity = await asyncio.to_thread(self._backend.get_current_identity)
        if identity is None:
            raise AccessDenied("unauthenticated")
        granted = await asyncio.to_thread(self._backend.has_role, identity, self._role)
        if not granted:
            raise AccessDenied("not_admin")
        return identity

    async def sign_in(self, *, email: str, password: str) -> Identity:
        """Password login that only succeeds when the role check also passes.

        Behavior:
            - Wrong credentials: `AuthError` from the backend propagates.
            - Signed in but no grant: the backend session is torn down and
              `AccessDenied("access_denied")` is raised.
        """
        await asyncio.to_thread(lambda: self._backend.sign_in(email=email, password=password))
        try:
            return await self.require_admin()
        except AuthError:
            logger.info("Admin login refused: role grant missing")
            await self.sign_out()
            raise AccessDenied("access_denied")

    async def sign_out(self) -> None:
        await asyncio.to_thread(self._backend.sign_out)


__all__ = ["SessionGuard", "LOGIN_PATH"]
