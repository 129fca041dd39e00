"""
Public registration routes (`/inscricao`).

Why:
    The form posts to the server, which validates, stores through the backend
    collaborator and redirects to the confirmation page (Post/Redirect/Get).
    Failures re-render the form with the visitor's input intact.

Notes:
    - The backend factory comes from `backend_wiring`, so tests can swap in the
      in-memory collaborator.
    - `_layout_response` lives in `main`; it is imported inside the handlers to
      avoid a circular import at startup.
"""
from __future__ import annotations

import logging
from uuid import uuid4

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, RedirectResponse

import backend_wiring
from components import Layout, Notice, RegistrationForm
from components.pages import RegistrationPage
from registration.domain import (
    FieldErrors,
    RegistrationValidationError,
    StorageError,
    SubmissionInFlightError,
)
from registration.submitter import RegistrationSubmitter

from .security import _is_same_origin, cross_site_forbidden

registration_router = APIRouter(tags=["Registration"])
logger = logging.getLogger("inscricoes.web.registration")

FORM_PATH = "/inscricao"
CONFIRMATION_PATH = "/confirmacao"


def _render_form(
    request: Request,
    *,
    submission_id: str,
    values: dict | None = None,
    errors: FieldErrors | None = None,
    notice: Notice | None = None,
    status_code: int = 200,
) -> HTMLResponse:
    import main

    form = RegistrationForm(submission_id=submission_id, values=values, errors=errors, notice=notice)
    layout = Layout(title="Inscrição", content=RegistrationPage(form).render(), current_path=FORM_PATH)
    return main._layout_response(
        request,
        layout,
        status_code=status_code,
        headers={"Cache-Control": "private, no-store"},
    )


@registration_router.get(FORM_PATH, response_class=HTMLResponse)
async def registration_form(request: Request):
    return _render_form(request, submission_id=uuid4().hex)


@registration_router.post(FORM_PATH, response_class=HTMLResponse)
async def registration_submit(request: Request):
    """Validate and store one registration.

    Behavior:
        - Invalid fields: 400, inline errors, nothing sent to the backend.
        - Same form instance already submitting: 409 with a waiting notice.
        - Backend failure: 503 with a generic retry notice.
        - Success: 303 to the confirmation page.
    Permissions:
        Public. Cross-site posts are rejected with 403.
    """
    if not _is_same_origin(request):
        return cross_site_forbidden()

    form = await request.form()
    values = {
        "nome": str(form.get("nome") or ""),
        "whatsapp": str(form.get("whatsapp") or ""),
    }
    submission_id = str(form.get("submission_id") or "") or uuid4().hex

    submitter = RegistrationSubmitter(backend_wiring.get_backend_factory())
    try:
        await submitter.submit(values["nome"], values["whatsapp"], submission_id=submission_id)
    except RegistrationValidationError as exc:
        return _render_form(request, submission_id=submission_id, values=values, errors=exc.errors, status_code=400)
    except SubmissionInFlightError:
        notice = Notice("Inscrição em andamento", "Aguarde a confirmação.", variant="info")
        return _render_form(request, submission_id=submission_id, values=values, notice=notice, status_code=409)
    except StorageError as exc:
        logger.warning("Registration not stored: %s", exc.code)
        notice = Notice("Erro ao realizar inscrição", "Tente novamente.")
        return _render_form(request, submission_id=submission_id, values=values, notice=notice, status_code=503)

    return RedirectResponse(url=CONFIRMATION_PATH, status_code=303)


__all__ = ["registration_router"]
