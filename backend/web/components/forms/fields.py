"""
Form field components.

A field renders its label, the input, and an inline error slot. The error
paragraph is linked to the input through `aria-describedby`.
"""

from typing import Optional

from ..base import Component


class FormField(Component):
    """Wrapper that renders label, input slot, help and error text."""

    def __init__(
        self,
        field_id: str,
        label: str,
        *,
        required: bool = False,
        help_text: Optional[str] = None,
        error_text: Optional[str] = None,
        visually_hidden_label: bool = False,
    ) -> None:
        self.field_id = field_id
        self.label = label
        self.required = required
        self.help_text = help_text
        self.error_text = error_text
        self.visually_hidden_label = visually_hidden_label

    def _described_by(self) -> Optional[str]:
        ids = []
        if self.help_text:
            ids.append(f"{self.field_id}-help")
        if self.error_text:
            ids.append(f"{self.field_id}-error")
        return " ".join(ids) or None

    def render(self, input_html: str) -> str:
        help_html = (
            f'<p class="form-help" id="{self.field_id}-help">{self.escape(self.help_text)}</p>'
            if self.help_text
            else ""
        )
        error_html = (
            f'<p class="form-error" role="alert" id="{self.field_id}-error">{self.escape(self.error_text)}</p>'
            if self.error_text
            else ""
        )
        label_attrs = self.attributes(
            for_=self.field_id,
            class_=self.classes("form-label", sr_only=self.visually_hidden_label),
        )
        wrapper = self.classes("form-field", form_field__error=bool(self.error_text))
        return (
            f'<div class="{wrapper}">'
            f"<label {label_attrs}>{self.escape(self.label)}</label>"
            f"{input_html}"
            f"{help_html}"
            f"{error_html}"
            "</div>"
        )


class TextInputField(FormField):
    """Single-line input (text, tel, email or password)."""

    def render(
        self,
        *,
        value: str = "",
        input_type: str = "text",
        autocomplete: Optional[str] = None,
        placeholder: Optional[str] = None,
        **attrs: str,
    ) -> str:
        input_attrs = self.attributes(
            id=self.field_id,
            name=self.field_id,
            type=input_type,
            value=value,
            class_="form-input",
            autocomplete=autocomplete,
            placeholder=placeholder,
            required=self.required,
            aria_describedby=self._described_by(),
            aria_invalid="true" if self.error_text else "false",
            **attrs,
        )
        return super().render(f"<input {input_attrs}>")
