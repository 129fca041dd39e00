"""
Registration domain types and errors.

The backend owns every registrant row. The application only holds frozen,
read-only copies for the duration of one request.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Registrant:
    id: str
    name: str
    phone: str
    created_at: datetime


@dataclass(frozen=True)
class FieldErrors:
    """One optional message per form field; `None` means the field is valid."""

    nome: Optional[str] = None
    whatsapp: Optional[str] = None

    def any(self) -> bool:
        return self.nome is not None or self.whatsapp is not None


class RegistrationValidationError(ValueError):
    """Submitted name/phone failed validation. Never reaches the backend."""

    def __init__(self, errors: FieldErrors, codes: dict[str, str] | None = None) -> None:
        super().__init__("invalid_registration")
        self.errors = errors
        # field -> TooShort | TooLong | InvalidFormat
        self.codes = dict(codes or {})


class StorageError(RuntimeError):
    """The backend failed to store or return registrants."""

    def __init__(self, code: str = "storage_error") -> None:
        super().__init__(code)
        self.code = code


class SubmissionInFlightError(RuntimeError):
    """A submission for the same form instance is still outstanding."""


__all__ = [
    "Registrant",
    "FieldErrors",
    "RegistrationValidationError",
    "StorageError",
    "SubmissionInFlightError",
]
