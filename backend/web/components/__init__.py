# Component system: pure Python classes that render HTML strings.

from .base import Component
from .layout import Layout
from .notice import Notice
from .forms import FormField, TextInputField, SubmitButton, RegistrationForm, AdminLoginForm
from .registrant_table import RegistrantTable
from .pager import Pager, SearchToolbar

__all__ = [
    "Component",
    "Layout",
    "Notice",
    "FormField",
    "TextInputField",
    "SubmitButton",
    "RegistrationForm",
    "AdminLoginForm",
    "RegistrantTable",
    "Pager",
    "SearchToolbar",
]
