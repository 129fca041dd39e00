"""
Admin routes: login, registrant panel, CSV export and logout.

Why:
    Only visitors whose backend identity holds the "admin" grant may see
    registrants. Every guarded request re-runs the session guard against the
    backend (identity, then role) before a single row is loaded, so a revoked
    grant takes effect on the next page load.

Security:
    - The browser holds only an opaque session id (HttpOnly cookie). Backend
      tokens stay in `main.SESSION_STORE`.
    - All responses carrying personal data or session changes are sent with
      `Cache-Control: private, no-store`.
    - POST handlers reject cross-site requests (403).
"""
from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, RedirectResponse, Response

import backend_wiring
from components import AdminLoginForm, Layout, Notice
from components.pages import AdminHeader, AdminLoginPage, AdminPanelPage
from identity_access.domain import AccessDenied, AuthError
from identity_access.guard import LOGIN_PATH, SessionGuard
from registration.backend import backend_session
from registration.domain import StorageError
from registration.export import display_timezone
from registration.listing import ListState, RegistrantListManager, project

from .security import _is_same_origin, cross_site_forbidden

admin_router = APIRouter(tags=["Admin"])
logger = logging.getLogger("inscricoes.web.admin")

ADMIN_PATH = "/admin"
EXPORT_PATH = "/admin/export.csv"
LOGOUT_PATH = "/admin/logout"
ACCESS_DENIED_NOTICE = "access_denied"

_NO_STORE = {"Cache-Control": "private, no-store"}


def _private_no_store() -> dict:
    return dict(_NO_STORE)


def _main():
    import main

    return main


def _login_redirect(session_id: Optional[str] = None) -> RedirectResponse:
    """302 to the login page; drops the server session and cookie when given."""
    response = RedirectResponse(url=LOGIN_PATH, status_code=302, headers=_private_no_store())
    if session_id:
        _main().end_session(response, session_id)
    return response


def _render_login(request: Request, *, email: str = "", notice: Optional[Notice] = None, status_code: int = 200) -> HTMLResponse:
    page = AdminLoginPage(AdminLoginForm(email=email, notice=notice))
    layout = Layout(title="Admin", content=page.render(), current_path=LOGIN_PATH, page_class="page-admin-login")
    return _main()._layout_response(request, layout, status_code=status_code, headers=_private_no_store())


def _session_tokens(request: Request):
    """Return (session_id, tokens) for the current cookie, or (sid, None)."""
    mod = _main()
    sid = mod.get_session_id(request)
    if not sid:
        return None, None
    try:
        rec = mod.SESSION_STORE.get(sid)
    except Exception as exc:
        logger.warning("Session store get failed: %s", exc.__class__.__name__)
        rec = None
    return sid, (rec.tokens if rec else None)


def _remember_tokens(session_id: str, previous, backend) -> None:
    """Store tokens the backend rotated while serving this request."""
    current = backend.tokens()
    if current is None or current == previous:
        return
    try:
        _main().SESSION_STORE.update_tokens(session_id, current)
    except Exception as exc:
        logger.warning("Session token update failed: %s", exc.__class__.__name__)


@admin_router.get(LOGIN_PATH, response_class=HTMLResponse)
async def admin_login_form(request: Request, notice: Optional[str] = None):
    banner = None
    if notice == ACCESS_DENIED_NOTICE:
        banner = Notice("Acesso negado", "Você não tem permissão de administrador.")
    return _render_login(request, notice=banner)


@admin_router.post(LOGIN_PATH, response_class=HTMLResponse)
async def admin_login(request: Request):
    """Password login that only succeeds for admins.

    Behavior:
        - Wrong credentials: 401, login form with "Erro ao entrar" and the
          backend's message; the e-mail stays filled in.
        - Signed in but no admin grant: backend session torn down, no server
          session created, 303 to `/admin-login?notice=access_denied`.
        - Admin: server session created, cookie set, 303 to `/admin`.
    """
    if not _is_same_origin(request):
        return cross_site_forbidden()

    form = await request.form()
    email = str(form.get("email") or "").strip()
    password = str(form.get("password") or "")

    try:
        async with backend_session(backend_wiring.get_backend_factory()) as backend:
            guard = SessionGuard(backend)
            await guard.sign_in(email=email, password=password)
            tokens = backend.tokens()
    except AccessDenied:
        return RedirectResponse(
            url=f"{LOGIN_PATH}?notice={ACCESS_DENIED_NOTICE}", status_code=303, headers=_private_no_store()
        )
    except AuthError as exc:
        logger.info("Admin login failed: %s", exc.code)
        return _render_login(request, email=email, notice=Notice("Erro ao entrar", exc.message), status_code=401)
    except StorageError as exc:
        logger.warning("Admin login unavailable: %s", exc.code)
        notice = Notice("Erro ao entrar", "Serviço indisponível. Tente novamente.")
        return _render_login(request, email=email, notice=notice, status_code=503)

    if tokens is None:
        return _render_login(request, email=email, notice=Notice("Erro ao entrar", "Sessão inválida."), status_code=401)

    response = RedirectResponse(url=ADMIN_PATH, status_code=303, headers=_private_no_store())
    _main().start_session(response, tokens, email=email)
    logger.info("Admin session started")
    return response


async def _load_registrants(backend) -> RegistrantListManager:
    manager = RegistrantListManager(backend, SessionGuard(backend))
    await manager.load()
    return manager


@admin_router.get(ADMIN_PATH, response_class=HTMLResponse)
async def admin_panel(
    request: Request,
    q: Optional[str] = None,
    page: Optional[str] = None,
    page_size: Optional[str] = None,
):
    """Registrant list with search and pagination.

    Permissions:
        Session guard (identity, then "admin" grant); otherwise 302 to login.
    """
    sid, tokens = _session_tokens(request)
    if tokens is None:
        return _login_redirect(sid)

    state = ListState.from_params(q=q, page=page, page_size=page_size)
    try:
        async with backend_session(backend_wiring.get_backend_factory(), tokens) as backend:
            manager = await _load_registrants(backend)
            _remember_tokens(sid, tokens, backend)
    except AccessDenied as exc:
        logger.info("Admin panel refused: %s", exc.code)
        return _login_redirect(sid)
    except StorageError as exc:
        logger.warning("Registrant list unavailable: %s", exc.code)
        content = AdminPanelPage(
            project((), state),
            notice=Notice("Erro ao carregar inscrições", "Tente novamente."),
        ).render()
        return _render_panel(request, content, state, status_code=503)

    view = manager.view(state)
    content = AdminPanelPage(view, tz=display_timezone()).render()
    return _render_panel(request, content, state)


def _render_panel(request: Request, content: str, state: ListState, *, status_code: int = 200) -> HTMLResponse:
    export_href = f"{EXPORT_PATH}?{urlencode({'q': state.query})}" if state.query else EXPORT_PATH
    layout = Layout(
        title="Painel Admin",
        content=content,
        current_path=ADMIN_PATH,
        page_class="page-admin",
        header_html=AdminHeader(export_href=export_href).render(),
    )
    return _main()._layout_response(request, layout, status_code=status_code, headers=_private_no_store())


@admin_router.get(EXPORT_PATH)
async def admin_export(request: Request, q: Optional[str] = None):
    """CSV of the currently filtered list (all pages), as a download.

    Permissions:
        Same guard as the panel; the role is re-checked on every export.
    """
    sid, tokens = _session_tokens(request)
    if tokens is None:
        return _login_redirect(sid)

    state = ListState.from_params(q=q)
    try:
        async with backend_session(backend_wiring.get_backend_factory(), tokens) as backend:
            manager = await _load_registrants(backend)
            _remember_tokens(sid, tokens, backend)
    except AccessDenied as exc:
        logger.info("Export refused: %s", exc.code)
        return _login_redirect(sid)
    except StorageError as exc:
        logger.warning("Export unavailable: %s", exc.code)
        return Response("Erro ao exportar. Tente novamente.", status_code=503, media_type="text/plain", headers=_private_no_store())

    export = manager.export(state, tz=display_timezone())
    logger.info("Registrant export served: %d rows", export.row_count)
    headers = _private_no_store()
    headers["Content-Disposition"] = f'attachment; filename="{export.filename}"'
    return Response(content=export.content, media_type=export.media_type, headers=headers)


@admin_router.post(LOGOUT_PATH)
async def admin_logout(request: Request):
    """Sign out at the backend, drop the server session and clear the cookie."""
    if not _is_same_origin(request):
        return cross_site_forbidden()

    sid, tokens = _session_tokens(request)
    if tokens is not None:
        try:
            async with backend_session(backend_wiring.get_backend_factory(), tokens) as backend:
                manager = RegistrantListManager(backend, SessionGuard(backend))
                await manager.logout()
        except StorageError as exc:
            # The local session is dropped regardless; backend tokens expire on their own.
            logger.warning("Backend sign-out unavailable: %s", exc.code)
    response = RedirectResponse(url=LOGIN_PATH, status_code=303, headers=_private_no_store())
    _main().end_session(response, sid)
    return response


__all__ = ["admin_router"]
