"""Normalisation and check-digit validation for CNPJ identifiers."""

from __future__ import annotations

import re
from collections.abc import Sequence
from typing import Final

from .errors import InvalidIdentifierError

CNPJ_LENGTH: Final = 14

_NON_DIGITS = re.compile(r"\D+")
_FIRST_WEIGHTS: Final = (5, 4, 3, 2, 9, 8, 7, 6, 5, 4, 3, 2)
_SECOND_WEIGHTS: Final = (6, 5, 4, 3, 2, 9, 8, 7, 6, 5, 4, 3, 2)


def normalize(raw: str) -> str:
    """Remove every non-digit character from *raw*."""

    return _NON_DIGITS.sub("", raw or "")


def _check_digit(digits: Sequence[int], weights: Sequence[int]) -> int:
    remainder = sum(d * w for d, w in zip(digits, weights)) % 11
    return 0 if remainder < 2 else 11 - remainder


def check_digits(base: str) -> str:
    """Return both check digits for the first twelve digits of *base*."""

    digits = [int(ch) for ch in normalize(base)[:12]]
    if len(digits) != 12:
        raise ValueError("Base do CNPJ deve conter 12 dígitos")
    first = _check_digit(digits, _FIRST_WEIGHTS)
    second = _check_digit([*digits, first], _SECOND_WEIGHTS)
    return f"{first}{second}"


def validate(cnpj: str) -> None:
    """Raise :class:`InvalidIdentifierError` unless *cnpj* is a valid normalised CNPJ."""

    if len(cnpj) != CNPJ_LENGTH or not cnpj.isascii() or not cnpj.isdigit():
        raise InvalidIdentifierError("CNPJ inválido: deve conter 14 dígitos")

    if len(set(cnpj)) == 1:
        raise InvalidIdentifierError("CNPJ inválido: dígitos repetidos")

    digits = [int(ch) for ch in cnpj]
    if _check_digit(digits[:12], _FIRST_WEIGHTS) != digits[12]:
        raise InvalidIdentifierError("CNPJ inválido: primeiro dígito verificador não confere")
    if _check_digit(digits[:13], _SECOND_WEIGHTS) != digits[13]:
        raise InvalidIdentifierError("CNPJ inválido: segundo dígito verificador não confere")


def is_valid(cnpj: str) -> bool:
    try:
        validate(cnpj)
    except InvalidIdentifierError:
        return False
    return True


def normalize_and_validate(raw: str) -> str:
    """Normalise *raw* and validate the result; returns the 14-digit form."""

    cnpj = normalize(raw)
    validate(cnpj)
    return cnpj


__all__ = [
    "CNPJ_LENGTH",
    "check_digits",
    "is_valid",
    "normalize",
    "normalize_and_validate",
    "validate",
]
