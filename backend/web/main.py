from __future__ import annotations

from pathlib import Path
import os
import logging
import sys as _sys
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from components import Layout
from components.pages import ConfirmationPage, LandingPage
from identity_access.stores import SessionStore
from registration.event import EVENT

from auth_utils import clear_session_cookie, set_session_cookie

# Routes import `main` lazily; `python main.py` must resolve to this module.
if __name__ == "__main__":
    _sys.modules.setdefault("main", _sys.modules[__name__])


def _should_load_dotenv() -> bool:
    """Decide if we should load a local .env file.

    - Never load under pytest; tests provide their own env.
    - Allow explicit opt-out via INSCRICOES_ENABLE_DOTENV (default true
      outside pytest).
    """
    if "pytest" in _sys.modules or os.getenv("PYTEST_CURRENT_TEST"):
        return False
    flag = (os.getenv("INSCRICOES_ENABLE_DOTENV", "true") or "").strip().lower()
    return flag in ("1", "true", "yes")


from dotenv import load_dotenv

if _should_load_dotenv():
    load_dotenv()

import config as _cfg

# Fail fast on insecure production configuration.
_cfg.ensure_secure_config_on_startup()

# --- App & Settings Setup -------------------------------------------------------


class AppSettings:
    def __init__(self) -> None:
        self._env_override: str | None = None

    @property
    def environment(self) -> str:
        if self._env_override is not None:
            return self._env_override
        return _cfg.current_environment()

    def override_environment(self, env: str | None) -> None:
        """Override environment for tests (e.g., "prod"), or reset with None."""
        self._env_override = env


logger = logging.getLogger("inscricoes.web")
SETTINGS = AppSettings()
SESSION_COOKIE_NAME = "inscricoes_session"
SESSION_STORE = SessionStore()

app = FastAPI(
    title="Aprendendo a Despertar - Inscrições",
    description="Inscrições do evento Mulheres Conectadas",
    version="1.0.0",
)

# --- Static Files & Routers -----------------------------------------------------

static_dir = Path(__file__).parent / "static"
app.mount("/static", StaticFiles(directory=str(static_dir)), name="static")

from routes.registration import registration_router
from routes.admin import admin_router

app.include_router(registration_router)
app.include_router(admin_router)

# --- Backend Wiring ---------------------------------------------------------------
from backend_wiring import wire_backend_from_env as _wire_backend

_wire_backend()

# --- Session Helpers --------------------------------------------------------------


def get_session_id(request: Request) -> Optional[str]:
    return request.cookies.get(SESSION_COOKIE_NAME) or None


def start_session(response, tokens, *, email: str = "") -> None:
    """Create a server-side session and hand the browser its opaque id."""
    ttl = _cfg.session_ttl_seconds()
    rec = SESSION_STORE.create(tokens=tokens, email=email, ttl_seconds=ttl)
    set_session_cookie(response, SESSION_COOKIE_NAME, rec.session_id, environment=SETTINGS.environment, max_age=ttl)


def end_session(response, session_id: Optional[str]) -> None:
    if session_id:
        try:
            SESSION_STORE.delete(session_id)
        except Exception as exc:
            logger.warning("Session delete failed: %s", exc.__class__.__name__)
    clear_session_cookie(response, SESSION_COOKIE_NAME, environment=SETTINGS.environment)


# --- Security Headers Middleware ----------------------------------------------


@app.middleware("http")
async def security_headers(request: Request, call_next):
    response = await call_next(request)
    if SETTINGS.environment in ("prod", "production"):
        csp = (
            "default-src 'self'; script-src 'self'; style-src 'self'; "
            "img-src 'self' data:; font-src 'self' data:; connect-src 'self'; "
            "form-action 'self'; frame-ancestors 'none';"
        )
    else:
        csp = (
            "default-src 'self'; script-src 'self' 'unsafe-inline'; style-src 'self' 'unsafe-inline'; "
            "img-src 'self' data:; font-src 'self' data:; connect-src 'self'; "
            "form-action 'self'; frame-ancestors 'none';"
        )
    response.headers.setdefault("Content-Security-Policy", csp)
    response.headers.setdefault("X-Frame-Options", "DENY")
    response.headers.setdefault("X-Content-Type-Options", "nosniff")
    response.headers.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")
    if SETTINGS.environment in ("prod", "production"):
        response.headers.setdefault("Cross-Origin-Opener-Policy", "same-origin")
    response.headers.setdefault("Permissions-Policy", "geolocation=(), microphone=(), camera=()")
    # HSTS: always on (dev = prod)
    response.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains")
    return response


def _layout_response(
    request: Request,
    layout: Layout,
    *,
    status_code: int = 200,
    headers: dict[str, str] | None = None,
) -> HTMLResponse:
    """Render a Layout and return an HTMLResponse.

    Parameters:
        request: Current request.
        layout: Prepared Layout component with title and content.
        status_code: HTTP status code for the response (defaults to 200).
        headers: Optional header overrides (e.g., `Cache-Control`).
    Permissions:
        None. Route handlers run the session guard before calling this helper.
    """
    response = HTMLResponse(content=layout.render(), status_code=status_code)
    if headers:
        for key, value in headers.items():
            response.headers[key] = value
    return response


# --- Public pages ---------------------------------------------------------------


@app.get("/", response_class=HTMLResponse)
async def landing(request: Request):
    layout = Layout(title=EVENT.title, content=LandingPage(EVENT).render(), current_path="/", page_class="page-landing")
    return _layout_response(request, layout)


@app.get("/confirmacao", response_class=HTMLResponse)
async def confirmation(request: Request):
    layout = Layout(
        title="Inscrição Confirmada",
        content=ConfirmationPage(EVENT).render(),
        current_path="/confirmacao",
    )
    return _layout_response(request, layout)


@app.get("/health")
async def health():
    return JSONResponse({"status": "healthy"}, headers={"Cache-Control": "no-store"})


def run() -> None:
    """Local entrypoint: `python main.py` (from backend/web)."""
    import uvicorn

    level_name = os.getenv("LOG_LEVEL", "INFO")
    logging.basicConfig(level=level_name.strip().upper() or "INFO")
    uvicorn.run(app, host=os.getenv("HOST", "127.0.0.1"), port=int(os.getenv("PORT", "8000")))


if __name__ == "__main__":
    run()
