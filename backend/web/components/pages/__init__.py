from .landing import LandingPage, ContactFooter
from .confirmation import ConfirmationPage
from .registration_page import RegistrationPage
from .admin import AdminLoginPage, AdminHeader, AdminPanelPage

__all__ = [
    "LandingPage",
    "ContactFooter",
    "ConfirmationPage",
    "RegistrationPage",
    "AdminLoginPage",
    "AdminHeader",
    "AdminPanelPage",
]
