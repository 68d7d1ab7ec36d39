"""Render sensitive values safe for log output."""

from __future__ import annotations


def mask_cnpj(value: str) -> str:
    """Format a 14-digit CNPJ as ``XX.XXX.XXX/XXXX-XX``; other input is returned unchanged."""

    if len(value) != 14:
        return value
    return f"{value[:2]}.{value[2:5]}.{value[5:8]}/{value[8:12]}-{value[12:]}"


def mask_email(value: str | None) -> str:
    """Keep the first two characters of the local part and the domain."""

    if not value:
        return ""
    local, sep, domain = value.strip().partition("@")
    if not sep:
        return "***"
    return f"{local[:2]}***@{domain}"


__all__ = ["mask_cnpj", "mask_email"]
