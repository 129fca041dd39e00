"""
Registration page: heading, the form and the contact line.
"""

from registration.event import EVENT

from ..base import Component
from ..forms import RegistrationForm


class RegistrationPage(Component):
    def __init__(self, form: RegistrationForm):
        self.form = form

    def render(self) -> str:
        return f"""
        <div class="centered">
            <div class="card card--narrow">
                <div class="text-center">
                    <h1>Inscrição</h1>
                    <p class="text-muted">Preencha seus dados para garantir sua vaga</p>
                </div>
                {self.form.render()}
                <p class="text-center text-muted text-sm">
                    Dúvidas? <a href="{self.escape(EVENT.contact_link)}">{self.escape(EVENT.contact_phone)}</a>
                </p>
            </div>
        </div>
        """
