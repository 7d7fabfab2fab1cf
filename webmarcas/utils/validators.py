"""Deterministic validators and sanitizers for Brazilian client data."""

from __future__ import annotations

import re
import unicodedata

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
CEP_PATTERN = re.compile(r"^\d{5}-\d{3}$")


def sanitize_text(value: str | None, max_len: int = 20000) -> str:
    """Sanitize free-form content before persistence/display."""
    if value is None:
        return ""
    cleaned = str(value).replace("\x00", "").strip()
    return cleaned[:max_len]


def only_digits(value: str | None) -> str:
    if not value:
        return ""
    return re.sub(r"\D", "", str(value))


def strip_accents(value: str) -> str:
    decomposed = unicodedata.normalize("NFD", value)
    return "".join(ch for ch in decomposed if unicodedata.category(ch) != "Mn")


def normalize_name(value: str | None) -> str:
    """Lowercase, accent-free, alphanumeric-and-space form used for matching."""
    if not value:
        return ""
    lowered = strip_accents(str(value).lower())
    return re.sub(r"[^a-z0-9\s]", "", lowered).strip()


def is_valid_email(value: str | None) -> bool:
    return bool(value) and bool(EMAIL_PATTERN.match(str(value).strip()))


def is_valid_cpf(value: str | None) -> bool:
    """Validate CPF check digits (11 digits, not all equal)."""
    digits = only_digits(value)
    if len(digits) != 11 or digits == digits[0] * 11:
        return False

    for position in (9, 10):
        total = sum(int(digits[i]) * ((position + 1) - i) for i in range(position))
        check = (total * 10) % 11
        if check == 10:
            check = 0
        if check != int(digits[position]):
            return False
    return True


def is_valid_cnpj(value: str | None) -> bool:
    """Validate CNPJ check digits (14 digits, not all equal)."""
    digits = only_digits(value)
    if len(digits) != 14 or digits == digits[0] * 14:
        return False

    weights_first = [5, 4, 3, 2, 9, 8, 7, 6, 5, 4, 3, 2]
    weights_second = [6] + weights_first
    for weights, position in ((weights_first, 12), (weights_second, 13)):
        total = sum(int(digits[i]) * weights[i] for i in range(position))
        remainder = total % 11
        check = 0 if remainder < 2 else 11 - remainder
        if check != int(digits[position]):
            return False
    return True
