"""
Landing page: event presentation with a single call to action.
"""

from registration.event import EVENT, EventInfo

from ..base import Component


class LandingPage(Component):
    def __init__(self, event: EventInfo = EVENT):
        self.event = event

    def render(self) -> str:
        e = self.event
        details = "".join(
            '<div class="detail-card">'
            f'<p class="detail-card__label">{self.escape(d.label)}</p>'
            f'<p class="detail-card__value">{self.escape(d.value)}</p>'
            "</div>"
            for d in e.detail_cards()
        )
        highlights = "".join(f'<span class="pill">{self.escape(h)}</span>' for h in e.highlights)
        return f"""
        <section class="hero">
            <p class="eyebrow">{self.escape(e.presenter)} apresenta</p>
            <h1 class="hero__title">{self.escape(e.title_lead)}</h1>
            <h1 class="hero__title hero__title--highlight">{self.escape(e.title_highlight)}</h1>
            <div class="hero__banner" role="img" aria-label="Banner do evento {self.escape(e.title)} - {self.escape(e.presenter)}"></div>
            <div class="details">{details}</div>
            <div class="highlights">{highlights}</div>
            <div class="text-center">
                <a href="/inscricao" class="btn btn-primary btn-cta">GARANTIR MINHA VAGA</a>
            </div>
        </section>
        {ContactFooter(e).render()}
        """


class ContactFooter(Component):
    def __init__(self, event: EventInfo = EVENT):
        self.event = event

    def render(self) -> str:
        return (
            '<footer class="content-footer text-center text-muted" role="contentinfo">'
            f'<p>Dúvidas? Entre em contato: <a href="{self.escape(self.event.contact_link)}">'
            f"{self.escape(self.event.contact_phone)}</a></p>"
            "</footer>"
        )
