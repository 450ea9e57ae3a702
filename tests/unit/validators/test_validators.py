from __future__ import annotations

from leadengine.utils.validators import (
    clean_optional,
    normalize_email,
    normalize_phone,
    sanitize_text,
)


def test_sanitize_text_strips_null_and_trims():
    assert sanitize_text("  hello\x00world  ") == "helloworld"
    assert sanitize_text(None) == ""
    assert sanitize_text("abcdef", max_len=3) == "abc"


def test_clean_optional_collapses_blank():
    assert clean_optional("   ") is None
    assert clean_optional(" Acme ") == "Acme"


def test_normalize_email():
    assert normalize_email("  Jane@Example.COM ") == "jane@example.com"
    assert normalize_email("") is None


def test_normalize_phone_keeps_leading_plus():
    assert normalize_phone("+1 (555) 123-4567") == "+15551234567"
    assert normalize_phone("555.123.4567") == "5551234567"
    assert normalize_phone("ext") is None
    assert normalize_phone(None) is None
