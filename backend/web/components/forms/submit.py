"""
Submit button component.

The page script swaps in `data-loading-label` and disables the button while
the form is being sent, so a second click cannot post the form twice.
"""

from typing import Optional

from ..base import Component


class SubmitButton(Component):
    """Primary form action button."""

    def __init__(
        self,
        label: str,
        *,
        loading_label: str = "Enviando...",
        is_loading: bool = False,
        disabled: bool = False,
        extra_class: Optional[str] = None,
    ) -> None:
        self.label = label
        self.loading_label = loading_label
        self.is_loading = is_loading
        self.disabled = disabled
        self.extra_class = extra_class

    def render(self) -> str:
        label = self.loading_label if self.is_loading else self.label
        attrs = self.attributes(
            type="submit",
            class_=self.classes("btn", "btn-primary", self.extra_class or ""),
            disabled=self.disabled or self.is_loading,
            data_loading_label=self.loading_label,
            aria_busy="true" if self.is_loading else None,
        )
        return f"<button {attrs}>{self.escape(label)}</button>"
