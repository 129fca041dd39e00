"""
Admin pages: login card and the registrant panel.

The panel is rendered only after the session guard passed and the list was
loaded, so there is no client-side loading state.
"""

from datetime import tzinfo
from typing import Optional

from registration.listing import RegistrantPage

from ..base import Component
from ..forms import AdminLoginForm
from ..notice import Notice
from ..pager import Pager, SearchToolbar, counter_label
from ..registrant_table import RegistrantTable


class AdminLoginPage(Component):
    def __init__(self, form: AdminLoginForm):
        self.form = form

    def render(self) -> str:
        return f"""
        <div class="centered">
            <div class="card card--narrow">
                <h1 class="text-center">Admin</h1>
                {self.form.render()}
            </div>
        </div>
        """


class AdminHeader(Component):
    """Panel title, CSV export link (keeps the active search) and logout."""

    def __init__(self, *, export_href: str):
        self.export_href = export_href

    def render(self) -> str:
        return f"""
        <header class="admin-header">
            <h1 class="admin-header__title">Painel Admin</h1>
            <div class="admin-header__actions">
                <a class="btn btn-primary btn-sm" href="{self.escape(self.export_href)}" download>Exportar CSV</a>
                <form method="post" action="/admin/logout" class="inline-form">
                    <button type="submit" class="btn btn-ghost btn-sm">Sair</button>
                </form>
            </div>
        </header>
        """


class AdminPanelPage(Component):
    def __init__(self, page: RegistrantPage, *, tz: Optional[tzinfo] = None, notice: Optional[Notice] = None):
        self.page = page
        self.tz = tz
        self.notice = notice

    def render(self) -> str:
        notice_html = self.notice.render() if self.notice else ""
        pager_html = Pager(self.page).render() if self.page.filtered else ""
        return f"""
        <div class="container">
            {notice_html}
            <div class="panel-heading">
                <div class="panel-heading__count">
                    <h2>Inscritas</h2>
                    <span class="pill" data-testid="registrant-count">{self.escape(counter_label(self.page))}</span>
                </div>
                {SearchToolbar(self.page).render()}
            </div>
            {RegistrantTable(self.page, tz=self.tz).render()}
            {pager_html}
        </div>
        """
