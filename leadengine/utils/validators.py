"""Deterministic validators and sanitizers used across services and API."""

from __future__ import annotations

import re

_PHONE_STRIP_RE = re.compile(r"[^\d]")


def sanitize_text(value: str | None, max_len: int = 20000) -> str:
    """Sanitize free-form content before persistence/display."""
    if value is None:
        return ""
    cleaned = str(value).replace("\x00", "").strip()
    cleaned = cleaned[:max_len]
    return cleaned


def clean_optional(value: str | None, max_len: int = 255) -> str | None:
    """Sanitize and collapse empty strings to ``None``."""
    cleaned = sanitize_text(value, max_len=max_len)
    return cleaned or None


def normalize_email(value: str | None) -> str | None:
    """Trim and lower-case an email; blank input yields ``None``."""
    cleaned = sanitize_text(value, max_len=320).lower()
    return cleaned or None


def normalize_phone(value: str | None) -> str | None:
    """Reduce a phone number to digits, keeping a leading ``+``.

    ``"+1 (555) 010-2000"`` becomes ``"+15550102000"``. Input without any
    digit yields ``None``.
    """
    cleaned = sanitize_text(value, max_len=64)
    if not cleaned:
        return None
    digits = _PHONE_STRIP_RE.sub("", cleaned)
    if not digits:
        return None
    return f"+{digits}" if cleaned.startswith("+") else digits
