"""
Pagination controls and the search/page-size toolbar of the admin panel.

Everything is a plain GET link or form, so the list state lives in the query
string (`q`, `page`, `page_size`) and nothing is remembered across sessions.
Links and hidden form fields are built from `ListState` transitions: each
control carries the state it leads to, minus the field the visitor edits.
"""

from urllib.parse import urlencode

from registration.listing import PAGE_SIZE_OPTIONS, ListState, RegistrantPage

from .base import Component

ADMIN_PATH = "/admin"


def state_params(state: ListState) -> dict:
    """Query parameters for `state`; an empty query is left out."""
    params = {"page": state.page, "page_size": state.page_size}
    if state.query:
        params = {"q": state.query, **params}
    return params


def admin_url(state: ListState) -> str:
    return f"{ADMIN_PATH}?{urlencode(state_params(state))}"


def counter_label(page: RegistrantPage) -> str:
    """`N inscritas`, or `N de M inscritas` while a search narrows the list."""
    if page.is_filtered:
        return f"{page.filtered_count} de {page.total_count} inscritas"
    return f"{page.filtered_count} inscritas"


def _hidden_fields(state: ListState, *, edited: str) -> str:
    return "".join(
        f'<input type="hidden" name="{name}" value="{Component.escape(value)}">'
        for name, value in state_params(state).items()
        if name != edited
    )


class SearchToolbar(Component):
    """Search box; submitting it starts over at page 1."""

    def __init__(self, page: RegistrantPage):
        self.page = page

    def render(self) -> str:
        target = self.page.state.with_query(self.page.query)
        attrs = self.attributes(
            type="search",
            name="q",
            value=self.page.query,
            placeholder="Pesquisar por nome...",
            class_="form-input search-input",
            aria_label="Pesquisar por nome",
        )
        return f"""
        <form method="get" action="{ADMIN_PATH}" class="search-form" role="search">
            <input {attrs}>
            {_hidden_fields(target, edited="q")}
        </form>
        """


class Pager(Component):
    """Page-size select plus previous/next controls.

    Boundary controls render as disabled buttons instead of links.
    """

    def __init__(self, page: RegistrantPage):
        self.page = page

    def render(self) -> str:
        p = self.page
        state = p.state
        options = "".join(
            f'<option value="{size}"{" selected" if size == p.page_size else ""}>{size}</option>'
            for size in PAGE_SIZE_OPTIONS
        )
        resized = state.with_page_size(p.page_size)
        prev_html = self._nav("Página anterior", "&lsaquo;", state.previous_page(p.total_pages), enabled=p.has_previous)
        next_html = self._nav("Próxima página", "&rsaquo;", state.next_page(p.total_pages), enabled=p.has_next)
        return f"""
        <div class="pager">
            <form method="get" action="{ADMIN_PATH}" class="page-size-form">
                {_hidden_fields(resized, edited="page_size")}
                <label for="page_size" class="text-muted">Itens por página:</label>
                <select id="page_size" name="page_size" class="form-select" data-autosubmit>{options}</select>
                <noscript><button type="submit" class="btn btn-ghost">OK</button></noscript>
            </form>
            <div class="pager__nav">
                <span class="text-muted">Página {p.page} de {p.total_pages}</span>
                {prev_html}
                {next_html}
            </div>
        </div>
        """

    def _nav(self, label: str, glyph: str, target: ListState, *, enabled: bool) -> str:
        if not enabled:
            return f'<button type="button" class="btn btn-icon" aria-label="{label}" disabled>{glyph}</button>'
        return f'<a class="btn btn-icon" href="{self.escape(admin_url(target))}" aria-label="{label}">{glyph}</a>'
