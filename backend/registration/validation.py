"""
Name/phone validation and the progressive phone mask.

Why:
    Keep the rules pure and framework-free so both the submitter and the tests
    use exactly the same checks. The mask is presentation only: it helps people
    type the number, it never decides whether a number is valid.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from .domain import FieldErrors, RegistrationValidationError

NAME_MIN_LENGTH = 3
NAME_MAX_LENGTH = 100
PHONE_MAX_DIGITS = 11

# Whole string, ASCII digits only (use fullmatch).
PHONE_PATTERN = re.compile(r"\(\d{2}\) \d{5}-\d{4}", re.ASCII)
_NON_DIGITS = re.compile(r"\D")

MSG_NAME_TOO_SHORT = "Nome deve ter pelo menos 3 caracteres"
MSG_NAME_TOO_LONG = "Nome deve ter no máximo 100 caracteres"
MSG_PHONE_INVALID = "Formato inválido. Use (XX) XXXXX-XXXX"


@dataclass(frozen=True)
class ValidRegistration:
    name: str
    phone: str


def validate_registration(name: str | None, phone: str | None) -> ValidRegistration:
    """Return the normalized pair or raise `RegistrationValidationError`.

    Behavior:
        - Name is trimmed; the trimmed length must lie within 3..100.
        - Phone must match `(XX) XXXXX-XXXX` exactly and is returned unchanged.
        - Every failing field is reported, not just the first one.
    """
    trimmed = (name or "").strip()
    raw_phone = phone or ""

    nome_error = None
    whatsapp_error = None
    codes: dict[str, str] = {}

    if len(trimmed) < NAME_MIN_LENGTH:
        nome_error = MSG_NAME_TOO_SHORT
        codes["nome"] = "TooShort"
    elif len(trimmed) > NAME_MAX_LENGTH:
        nome_error = MSG_NAME_TOO_LONG
        codes["nome"] = "TooLong"

    if not PHONE_PATTERN.fullmatch(raw_phone):
        whatsapp_error = MSG_PHONE_INVALID
        codes["whatsapp"] = "InvalidFormat"

    errors = FieldErrors(nome=nome_error, whatsapp=whatsapp_error)
    if errors.any():
        raise RegistrationValidationError(errors, codes)
    return ValidRegistration(name=trimmed, phone=raw_phone)


def format_phone(value: str | None) -> str:
    """Mask raw input into `(DD) DDDDD-DDDD` as far as the digits allow.

    Examples:
        >>> format_phone("")
        ''
        >>> format_phone("2")
        '(2'
        >>> format_phone("229885")
        '(22) 9885'
        >>> format_phone("22988516911999")
        '(22) 98851-6911'
    """
    digits = _NON_DIGITS.sub("", value or "")[:PHONE_MAX_DIGITS]
    if len(digits) <= 2:
        return f"({digits}" if digits else ""
    if len(digits) <= 7:
        return f"({digits[:2]}) {digits[2:]}"
    return f"({digits[:2]}) {digits[2:7]}-{digits[7:]}"


__all__ = [
    "ValidRegistration",
    "validate_registration",
    "format_phone",
    "PHONE_PATTERN",
    "MSG_NAME_TOO_SHORT",
    "MSG_NAME_TOO_LONG",
    "MSG_PHONE_INVALID",
]
