"""
Layout component: the HTML document shell shared by every page.
"""

from typing import Optional

from .base import Component

SITE_NAME = "Mulheres Conectadas"


class Layout(Component):
    """Wrap pre-rendered page content into a complete document."""

    def __init__(
        self,
        title: str,
        content: str,
        *,
        current_path: str = "/",
        page_class: Optional[str] = None,
        header_html: str = "",
    ):
        """
        Args:
            title: Page title (will be escaped)
            content: Main content HTML (pre-rendered components)
            current_path: Request path, exposed as `data-path` for the page script
            page_class: Optional extra class on <body> (e.g. "page-admin")
            header_html: Optional pre-rendered header placed above <main>
        """
        self.title = title
        self.content = content
        self.current_path = current_path
        self.page_class = page_class
        self.header_html = header_html

    def render(self) -> str:
        body_attrs = self.attributes(
            class_=self.classes("page", self.page_class or ""),
            data_path=self.current_path,
        )
        return f"""<!DOCTYPE html>
<html lang="pt-BR">
<head>
    {self._render_head()}
</head>
<body {body_attrs}>
    <a href="#main-content" class="skip-link">Pular para o conteúdo</a>
    {self.header_html}
    <div id="live-region" class="sr-only" role="status" aria-live="polite" aria-atomic="true"></div>
    <main id="main-content" class="main-content" role="main">
        {self.content}
    </main>
</body>
</html>"""

    def _render_head(self) -> str:
        return f"""
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <meta name="description" content="Aprendendo a Despertar - evento Mulheres Conectadas">
    <title>{self.escape(self.title)} - {SITE_NAME}</title>
    <link rel="stylesheet" href="/static/css/app.css?v=1">
    <script src="/static/js/app.js?v=1" defer></script>
    """
