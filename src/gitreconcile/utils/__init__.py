"""Shared helpers: URL classification, secret redaction, atomic writes."""

from __future__ import annotations

from gitreconcile.utils.atomic import atomic_write_bytes, atomic_write_text
from gitreconcile.utils.security import redact_url, scrub_secrets, url_scheme

__all__ = [
    "atomic_write_bytes",
    "atomic_write_text",
    "redact_url",
    "scrub_secrets",
    "url_scheme",
]
