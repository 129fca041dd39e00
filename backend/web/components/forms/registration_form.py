"""
Registration form component (`/inscricao`).
"""
from typing import Optional

from registration.domain import FieldErrors
from registration.validation import format_phone

from ..base import Component
from ..notice import Notice
from .fields import TextInputField
from .submit import SubmitButton

PHONE_HINT = "Formato: (XX) XXXXX-XXXX"


class RegistrationForm(Component):
    """Name + WhatsApp form with inline errors and a one-shot submit button.

    `submission_id` identifies this form instance; the server refuses a second
    concurrent post carrying the same id.
    """

    def __init__(
        self,
        *,
        submission_id: str,
        values: Optional[dict] = None,
        errors: Optional[FieldErrors] = None,
        notice: Optional[Notice] = None,
    ):
        self.submission_id = submission_id
        self.values = values or {}
        self.errors = errors or FieldErrors()
        self.notice = notice

    def render(self) -> str:
        nome = TextInputField("nome", "Nome Completo", required=True, error_text=self.errors.nome)
        whatsapp = TextInputField(
            "whatsapp",
            "WhatsApp",
            required=True,
            help_text=PHONE_HINT,
            error_text=self.errors.whatsapp,
        )
        notice_html = self.notice.render() if self.notice else ""
        submit_btn = SubmitButton("CONFIRMAR INSCRIÇÃO", loading_label="Enviando...", extra_class="btn-block")
        return f"""
        {notice_html}
        <form method="post" action="/inscricao" class="registration-form" data-single-submit novalidate>
            <input type="hidden" name="submission_id" value="{self.escape(self.submission_id)}">
            {nome.render(value=self.values.get("nome", ""), placeholder="Seu nome completo", autocomplete="name", maxlength="100")}
            {whatsapp.render(value=format_phone(self.values.get("whatsapp", "")), input_type="tel", placeholder="(22) 98851-6911", autocomplete="tel", inputmode="numeric", data_mask="phone", maxlength="15")}
            <div class="form-actions">
                {submit_btn.render()}
            </div>
        </form>
        """
