"""
Registrant table and its empty states for the admin panel.
"""

from datetime import tzinfo
from typing import Optional

from registration.export import format_date_br
from registration.listing import RegistrantPage

from .base import Component

EMPTY_SEARCH_MESSAGE = "Nenhuma inscrita encontrada com esse nome."
EMPTY_LIST_MESSAGE = "Nenhuma inscrição ainda."


class RegistrantTable(Component):
    """Render one page of registrants; row numbers continue across pages."""

    def __init__(self, page: RegistrantPage, *, tz: Optional[tzinfo] = None):
        self.page = page
        self.tz = tz

    def render(self) -> str:
        if not self.page.filtered:
            message = EMPTY_SEARCH_MESSAGE if self.page.query else EMPTY_LIST_MESSAGE
            return f'<div class="card empty-state"><p class="text-muted">{self.escape(message)}</p></div>'
        rows = "\n".join(self._render_row(i, r) for i, r in enumerate(self.page.rows))
        return f"""
        <div class="card table-wrapper">
            <table class="registrant-table">
                <thead>
                    <tr><th scope="col">#</th><th scope="col">Nome</th><th scope="col">WhatsApp</th><th scope="col">Data</th></tr>
                </thead>
                <tbody>
                    {rows}
                </tbody>
            </table>
        </div>
        """

    def _render_row(self, index: int, registrant) -> str:
        number = self.page.offset + index + 1
        return (
            f'<tr data-registrant-id="{self.escape(registrant.id)}">'
            f'<td class="text-muted">{number}</td>'
            f'<td class="font-medium">{self.escape(registrant.name)}</td>'
            f"<td>{self.escape(registrant.phone)}</td>"
            f'<td class="text-muted">{self.escape(format_date_br(registrant.created_at, self.tz))}</td>'
            "</tr>"
        )
