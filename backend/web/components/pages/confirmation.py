"""
Confirmation page shown after a successful registration.
"""

from registration.event import EVENT, EventInfo

from ..base import Component

CONFIRMATION_MESSAGE = "Estamos ansiosas por te receber para este tempo de despertar."


class ConfirmationPage(Component):
    def __init__(self, event: EventInfo = EVENT):
        self.event = event

    def render(self) -> str:
        e = self.event
        return f"""
        <div class="centered">
            <div class="card card--narrow text-center">
                <div class="check-icon" aria-hidden="true">&#10003;</div>
                <h1>Inscrição Confirmada!</h1>
                <p class="text-muted text-lg">{CONFIRMATION_MESSAGE}</p>
                <div class="event-box">
                    <p class="event-box__when">{self.escape(e.when)}</p>
                    <p class="text-muted">{self.escape(e.presenter)}</p>
                </div>
                <a href="/" class="link">&larr; Voltar ao início</a>
            </div>
        </div>
        """
