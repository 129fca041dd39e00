"""
Admin area end-to-end: login gate, registrant panel, CSV export, logout.

Sessions are seeded straight into `main.SESSION_STORE` (tokens come from a real
in-memory sign-in), so the cookie can be set on the client explicitly.
"""
from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from http.cookies import SimpleCookie

import httpx
import pytest
from httpx import ASGITransport

import main  # type: ignore
from conftest import ADMIN_EMAIL, ADMIN_PASSWORD, MEMBER_EMAIL, MEMBER_PASSWORD
from identity_access.domain import AuthTokens
from registration.backend import InMemoryBackend

pytestmark = pytest.mark.anyio("asyncio")

SAME_ORIGIN = {"Origin": "http://test"}
BASE = datetime(2025, 3, 1, 15, 0, tzinfo=timezone.utc)


def _client():
    return httpx.AsyncClient(transport=ASGITransport(app=main.app), base_url="http://test")


def _session_for(store, email: str, password: str) -> str:
    backend = InMemoryBackend(store)
    backend.connect()
    backend.sign_in(email=email, password=password)
    rec = main.SESSION_STORE.create(tokens=backend.tokens(), email=email)
    return rec.session_id


def _seed(store, names):
    """Add registrants one minute apart; the last name is the newest."""
    for i, name in enumerate(names):
        store.add_registrant(name=name, phone=f"(22) 98851-{6900 + i:04d}", created_at=BASE + timedelta(minutes=i))


async def test_panel_without_session_redirects_to_login(memory_store):
    async with _client() as client:
        r = await client.get("/admin")
    assert r.status_code == 302
    assert r.headers["location"] == "/admin-login"
    assert r.headers.get("Cache-Control") == "private, no-store"


async def test_export_without_session_redirects_to_login(memory_store):
    async with _client() as client:
        r = await client.get("/admin/export.csv")
    assert r.status_code == 302
    assert r.headers["location"] == "/admin-login"


async def test_login_page_renders_form(memory_store):
    async with _client() as client:
        r = await client.get("/admin-login")
    assert r.status_code == 200
    assert 'name="email"' in r.text and 'name="password"' in r.text
    assert 'data-loading-label="Entrando..."' in r.text
    assert "Acesso negado" not in r.text


async def test_admin_login_sets_hardened_cookie_and_redirects(memory_store):
    async with _client() as client:
        r = await client.post(
            "/admin-login",
            data={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD},
            headers=SAME_ORIGIN,
        )
    assert r.status_code == 303
    assert r.headers["location"] == "/admin"
    set_cookie = r.headers.get("set-cookie", "")
    cookie = SimpleCookie()
    cookie.load(set_cookie)
    morsel = cookie[main.SESSION_COOKIE_NAME]
    assert morsel.value
    assert "httponly" in set_cookie.lower()
    assert "secure" in set_cookie.lower()
    assert "samesite=lax" in set_cookie.lower()
    rec = main.SESSION_STORE.get(morsel.value)
    assert rec is not None and rec.email == ADMIN_EMAIL


async def test_member_login_is_signed_out_and_sees_access_denied(memory_store):
    async with _client() as client:
        r = await client.post(
            "/admin-login",
            data={"email": MEMBER_EMAIL, "password": MEMBER_PASSWORD},
            headers=SAME_ORIGIN,
        )
        assert r.status_code == 303
        assert r.headers["location"] == "/admin-login?notice=access_denied"
        assert main.SESSION_COOKIE_NAME not in r.headers.get("set-cookie", "")
        page = await client.get(r.headers["location"])
    assert "Acesso negado" in page.text
    assert "Você não tem permissão de administrador." in page.text
    # The member's backend session was torn down again.
    assert memory_store.access_tokens == {}


async def test_wrong_password_keeps_email_and_shows_error(memory_store):
    async with _client() as client:
        r = await client.post(
            "/admin-login",
            data={"email": ADMIN_EMAIL, "password": "nope"},
            headers=SAME_ORIGIN,
        )
    assert r.status_code == 401
    assert "Erro ao entrar" in r.text
    assert "Invalid login credentials" in r.text
    assert f'value="{ADMIN_EMAIL}"' in r.text
    assert "nope" not in r.text
    assert main.SESSION_COOKIE_NAME not in r.headers.get("set-cookie", "")


async def test_cross_site_login_is_forbidden(memory_store):
    async with _client() as client:
        r = await client.post(
            "/admin-login",
            data={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD},
            headers={"Origin": "https://evil.example"},
        )
    assert r.status_code == 403


async def test_panel_lists_newest_first_with_counter(memory_store):
    _seed(memory_store, ["Ana Souza", "Beatriz Lima", "Carla Dias"])
    sid = _session_for(memory_store, ADMIN_EMAIL, ADMIN_PASSWORD)
    async with _client() as client:
        client.cookies.set(main.SESSION_COOKIE_NAME, sid)
        r = await client.get("/admin")
    assert r.status_code == 200
    assert r.headers.get("Cache-Control") == "private, no-store"
    html = r.text
    assert "Painel Admin" in html
    assert "3 inscritas" in html
    assert html.index("Carla Dias") < html.index("Beatriz Lima") < html.index("Ana Souza")
    assert "01/03/2025" in html
    assert 'href="/admin/export.csv"' in html


async def test_empty_panel_shows_empty_state(memory_store):
    sid = _session_for(memory_store, ADMIN_EMAIL, ADMIN_PASSWORD)
    async with _client() as client:
        client.cookies.set(main.SESSION_COOKIE_NAME, sid)
        r = await client.get("/admin")
    assert r.status_code == 200
    assert "Nenhuma inscrição ainda." in r.text
    assert "0 inscritas" in r.text


async def test_search_filters_and_counter_shows_both_totals(memory_store):
    _seed(memory_store, ["Ana Souza", "Beatriz Lima", "Mariana Alves"])
    sid = _session_for(memory_store, ADMIN_EMAIL, ADMIN_PASSWORD)
    async with _client() as client:
        client.cookies.set(main.SESSION_COOKIE_NAME, sid)
        r = await client.get("/admin", params={"q": "ana"})
    html = r.text
    assert "2 de 3 inscritas" in html
    assert "Ana Souza" in html and "Mariana Alves" in html
    assert "Beatriz Lima" not in html
    assert 'href="/admin/export.csv?q=ana"' in html


async def test_search_without_match_shows_search_empty_state(memory_store):
    _seed(memory_store, ["Ana Souza"])
    sid = _session_for(memory_store, ADMIN_EMAIL, ADMIN_PASSWORD)
    async with _client() as client:
        client.cookies.set(main.SESSION_COOKIE_NAME, sid)
        r = await client.get("/admin", params={"q": "zélia"})
    assert "Nenhuma inscrita encontrada com esse nome." in r.text
    assert "0 de 1 inscritas" in r.text


async def test_pagination_walks_pages_and_disables_boundaries(memory_store):
    _seed(memory_store, [f"Pessoa {i:02d}" for i in range(12)])
    sid = _session_for(memory_store, ADMIN_EMAIL, ADMIN_PASSWORD)
    async with _client() as client:
        client.cookies.set(main.SESSION_COOKIE_NAME, sid)
        first = await client.get("/admin")
        second = await client.get("/admin", params={"page": "2"})
        beyond = await client.get("/admin", params={"page": "9"})
        big = await client.get("/admin", params={"page_size": "25"})

    assert "Página 1 de 2" in first.text
    assert 'aria-label="Página anterior" disabled' in first.text
    assert 'href="/admin?page=2&amp;page_size=10"' in first.text
    assert "Pessoa 11" in first.text and "Pessoa 01" not in first.text

    assert "Página 2 de 2" in second.text
    assert 'aria-label="Próxima página" disabled' in second.text
    assert "Pessoa 01" in second.text and "Pessoa 00" in second.text
    assert "<td class=\"text-muted\">11</td>" in second.text

    assert "Página 2 de 2" in beyond.text

    assert "Página 1 de 1" in big.text
    assert '<option value="25" selected>' in big.text


async def test_invalid_page_size_falls_back_to_default(memory_store):
    _seed(memory_store, [f"Pessoa {i:02d}" for i in range(11)])
    sid = _session_for(memory_store, ADMIN_EMAIL, ADMIN_PASSWORD)
    async with _client() as client:
        client.cookies.set(main.SESSION_COOKIE_NAME, sid)
        r = await client.get("/admin", params={"page_size": "7"})
    assert "Página 1 de 2" in r.text
    assert '<option value="10" selected>' in r.text


async def test_export_contains_only_matching_rows(memory_store):
    _seed(memory_store, ["Ana Souza", "Beatriz Lima", "Mariana Alves"])
    sid = _session_for(memory_store, ADMIN_EMAIL, ADMIN_PASSWORD)
    async with _client() as client:
        client.cookies.set(main.SESSION_COOKIE_NAME, sid)
        r = await client.get("/admin/export.csv", params={"q": "ana"})
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/csv")
    assert r.headers["content-disposition"] == 'attachment; filename="inscricoes-mulheres-conectadas.csv"'
    assert r.headers.get("Cache-Control") == "private, no-store"
    assert r.text == (
        "Nome,WhatsApp,Data de Inscrição\n"
        '"Mariana Alves","(22) 98851-6902","01/03/2025"\n'
        '"Ana Souza","(22) 98851-6900","01/03/2025"'
    )


async def test_export_spans_all_pages(memory_store):
    _seed(memory_store, [f"Pessoa {i:02d}" for i in range(15)])
    sid = _session_for(memory_store, ADMIN_EMAIL, ADMIN_PASSWORD)
    async with _client() as client:
        client.cookies.set(main.SESSION_COOKIE_NAME, sid)
        r = await client.get("/admin/export.csv")
    lines = r.text.split("\n")
    assert len(lines) == 16


async def test_revoked_role_redirects_on_next_load(memory_store):
    sid = _session_for(memory_store, ADMIN_EMAIL, ADMIN_PASSWORD)
    admin_id = memory_store.users[ADMIN_EMAIL].id
    async with _client() as client:
        client.cookies.set(main.SESSION_COOKIE_NAME, sid)
        ok = await client.get("/admin")
        memory_store.revoke_role(admin_id, "admin")
        r = await client.get("/admin")
        export = await client.get("/admin/export.csv")
    assert ok.status_code == 200
    assert r.status_code == 302
    assert r.headers["location"] == "/admin-login"
    assert export.status_code == 302
    assert main.SESSION_STORE.get(sid) is None


async def test_unknown_session_id_redirects_and_clears_cookie(memory_store):
    async with _client() as client:
        client.cookies.set(main.SESSION_COOKIE_NAME, "does-not-exist")
        r = await client.get("/admin")
    assert r.status_code == 302
    assert main.SESSION_COOKIE_NAME in r.headers.get("set-cookie", "")


async def test_logout_drops_session_and_backend_tokens(memory_store):
    sid = _session_for(memory_store, ADMIN_EMAIL, ADMIN_PASSWORD)
    assert len(memory_store.access_tokens) == 1
    async with _client() as client:
        client.cookies.set(main.SESSION_COOKIE_NAME, sid)
        r = await client.post("/admin/logout", headers=SAME_ORIGIN)
    assert r.status_code == 303
    assert r.headers["location"] == "/admin-login"
    assert main.SESSION_STORE.get(sid) is None
    assert memory_store.access_tokens == {}
    set_cookie = r.headers.get("set-cookie", "")
    assert main.SESSION_COOKIE_NAME in set_cookie
    assert "max-age=0" in set_cookie.lower()


async def test_cross_site_logout_is_forbidden(memory_store):
    sid = _session_for(memory_store, ADMIN_EMAIL, ADMIN_PASSWORD)
    async with _client() as client:
        client.cookies.set(main.SESSION_COOKIE_NAME, sid)
        r = await client.post("/admin/logout", headers={"Origin": "https://evil.example"})
    assert r.status_code == 403
    assert main.SESSION_STORE.get(sid) is not None


async def test_backend_failure_on_panel_returns_503_notice(memory_store, monkeypatch):
    from registration.domain import StorageError

    sid = _session_for(memory_store, ADMIN_EMAIL, ADMIN_PASSWORD)

    def _fail(self):
        raise StorageError("list_failed")

    monkeypatch.setattr(InMemoryBackend, "list_registrants", _fail)
    async with _client() as client:
        client.cookies.set(main.SESSION_COOKIE_NAME, sid)
        r = await client.get("/admin")
    assert r.status_code == 503
    assert "Erro ao carregar inscrições" in r.text


def _form_params(html: str, form_class: str, **edits) -> dict:
    """Collect what a browser would submit for the GET form with `form_class`."""
    match = re.search(rf'<form[^>]*class="{form_class}"[^>]*>(.*?)</form>', html, re.S)
    assert match, form_class
    body = match.group(1)
    params = dict(re.findall(r'<input[^>]*name="([^"]+)"[^>]*value="([^"]*)"', body))
    selected = re.search(r'<select[^>]*name="([^"]+)".*?<option value="([^"]+)" selected>', body, re.S)
    if selected:
        params[selected.group(1)] = selected.group(2)
    params.update(edits)
    return params


async def test_search_and_page_size_forms_restart_at_first_page(memory_store):
    _seed(memory_store, [f"Ana {i:02d}" for i in range(30)] + ["Beatriz Lima"])
    sid = _session_for(memory_store, ADMIN_EMAIL, ADMIN_PASSWORD)
    async with _client() as client:
        client.cookies.set(main.SESSION_COOKIE_NAME, sid)
        r = await client.get("/admin", params={"q": "ana", "page": "2"})
        assert "Página 2 de 3" in r.text

        resized = await client.get("/admin", params=_form_params(r.text, "page-size-form", page_size="25"))
        searched = await client.get("/admin", params=_form_params(r.text, "search-form", q="an"))

    assert _form_params(r.text, "page-size-form")["page"] == "1"
    assert _form_params(r.text, "search-form")["page"] == "1"
    assert "Página 1 de 2" in resized.text
    assert "30 de 31 inscritas" in resized.text
    assert "Página 1 de 3" in searched.text


class _RotatingBackend(InMemoryBackend):
    """Issues a fresh access token on connect, like a backend refreshing an expired JWT."""

    def connect(self) -> None:
        super().connect()
        if self._tokens:
            with self._store.lock:
                user_id = self._store.access_tokens.pop(self._tokens.access_token, None)
                if user_id is None:
                    return
                fresh = f"{self._tokens.access_token}-r"
                self._store.access_tokens[fresh] = user_id
            self._tokens = AuthTokens(access_token=fresh, refresh_token=self._tokens.refresh_token)


async def test_refreshed_backend_tokens_are_kept_in_the_session(memory_store):
    import backend_wiring  # type: ignore

    sid = _session_for(memory_store, ADMIN_EMAIL, ADMIN_PASSWORD)
    original = main.SESSION_STORE.get(sid).tokens
    backend_wiring.set_backend_factory(lambda tokens: _RotatingBackend(memory_store, tokens))
    async with _client() as client:
        client.cookies.set(main.SESSION_COOKIE_NAME, sid)
        first = await client.get("/admin")
        second = await client.get("/admin")
        export = await client.get("/admin/export.csv")

    assert first.status_code == 200
    assert second.status_code == 200
    assert export.status_code == 200
    stored = main.SESSION_STORE.get(sid).tokens
    assert stored.access_token == original.access_token + "-r-r-r"
    assert stored.refresh_token == original.refresh_token
