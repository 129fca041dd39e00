"""
Admin login form component (`/admin-login`).
"""
from typing import Optional

from ..base import Component
from ..notice import Notice
from .fields import TextInputField
from .submit import SubmitButton


class AdminLoginForm(Component):
    def __init__(self, *, email: str = "", notice: Optional[Notice] = None):
        self.email = email
        self.notice = notice

    def render(self) -> str:
        email = TextInputField("email", "E-mail", required=True, visually_hidden_label=True)
        password = TextInputField("password", "Senha", required=True, visually_hidden_label=True)
        notice_html = self.notice.render() if self.notice else ""
        submit_btn = SubmitButton("Entrar", loading_label="Entrando...", extra_class="btn-block")
        # The password is never echoed back into the form.
        return f"""
        {notice_html}
        <form method="post" action="/admin-login" class="admin-login-form" data-single-submit>
            {email.render(value=self.email, input_type="email", placeholder="E-mail", autocomplete="username")}
            {password.render(input_type="password", placeholder="Senha", autocomplete="current-password")}
            <div class="form-actions">
                {submit_btn.render()}
            </div>
        </form>
        """
