"""Helpers for base64 PDF payloads and caller-supplied identities."""

from __future__ import annotations

import re

_DATA_URL_PREFIX = re.compile(r"^data:[^;,]*;base64,", re.IGNORECASE)
_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_FILENAME_UNSAFE = re.compile(r"[^a-zA-Z0-9-]")


def strip_data_url(payload: str) -> str:
    """Remove a ``data:application/pdf;base64,`` style prefix if present."""
    return _DATA_URL_PREFIX.sub("", payload.strip())


def decoded_size(payload: str) -> int:
    """Decoded byte size of a base64 payload: 3 bytes per 4 chars, less padding."""
    data = strip_data_url(payload).rstrip()
    padding = len(data) - len(data.rstrip("="))
    return len(data) * 3 // 4 - min(padding, 2)


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def is_valid_email(email: str) -> bool:
    return bool(_EMAIL_PATTERN.match(email))


def safe_filename(first_name: str | None, last_name: str | None) -> str:
    """``First-Last-resume.pdf`` with anything outside [A-Za-z0-9-] removed."""
    stem = _FILENAME_UNSAFE.sub("", f"{first_name or ''}-{last_name or ''}").strip("-")
    return f"{stem or 'resume'}-resume.pdf"