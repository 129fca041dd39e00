"""
Form components: field wrappers, the submit button and the two site forms.
"""

from .fields import FormField, TextInputField
from .submit import SubmitButton
from .registration_form import RegistrationForm
from .admin_login_form import AdminLoginForm

__all__ = [
    "FormField",
    "TextInputField",
    "SubmitButton",
    "RegistrationForm",
    "AdminLoginForm",
]
