"""
Dismissible notice (toast-like banner) for errors and confirmations.
"""

from .base import Component


class Notice(Component):
    """Title plus short description; `variant` is "destructive" or "info"."""

    def __init__(self, title: str, description: str = "", *, variant: str = "destructive") -> None:
        self.title = title
        self.description = description
        self.variant = variant

    def render(self) -> str:
        role = "alert" if self.variant == "destructive" else "status"
        attrs = self.attributes(
            class_=self.classes("notice", f"notice--{self.variant}"),
            role=role,
            data_notice=True,
        )
        description = (
            f'<p class="notice__description">{self.escape(self.description)}</p>' if self.description else ""
        )
        return (
            f"<div {attrs}>"
            f'<p class="notice__title">{self.escape(self.title)}</p>'
            f"{description}"
            '<button type="button" class="notice__close" data-dismiss="notice" aria-label="Fechar">&times;</button>'
            "</div>"
        )
