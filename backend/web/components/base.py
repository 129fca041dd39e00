"""
Base class for the server-rendered HTML components.

Pages are plain Python objects with a `render()` method returning a string.
Every piece of visitor-supplied text goes through `escape()` before it is
interpolated into markup.
"""

from typing import Any, Optional
import html


class Component:
    """Base class for all UI components."""

    def render(self) -> str:
        raise NotImplementedError("Subclasses must implement render()")

    @staticmethod
    def escape(text: Optional[Any]) -> str:
        """HTML-escape `text`; None renders as an empty string."""
        return html.escape(str(text)) if text is not None else ""

    @staticmethod
    def classes(*args: str, **conditionals: bool) -> str:
        """Join CSS classes, adding each keyword class only when its value is true.

        Example:
            >>> Component.classes("btn", "btn-primary", disabled=True, active=False)
            'btn btn-primary disabled'
        """
        names = [a for a in args if a]
        names.extend(key.replace("_", "-") for key, value in conditionals.items() if value)
        return " ".join(names)

    @staticmethod
    def attributes(**attrs: Any) -> str:
        """Build an HTML attribute string.

        `class_` becomes `class`, `for_` becomes `for`, `data_x` becomes
        `data-x`. True renders a boolean attribute; False and None are skipped.

        Example:
            >>> Component.attributes(id="nome", data_mask="phone", required=True)
            'id="nome" data-mask="phone" required'
        """
        result = []
        for key, value in attrs.items():
            if key.endswith("_"):
                key = key[:-1]
            else:
                key = key.replace("_", "-")
            if value is True:
                result.append(key)
            elif value is not False and value is not None:
                result.append(f'{key}="{html.escape(str(value))}"')
        return " ".join(result)
