"""Utilities for safe structured logging fields."""

from __future__ import annotations

import hashlib
from typing import Any


def safe_log_identifier(value: Any, *, prefix: str) -> str:
    """Return a deterministic non-reversible token for log correlation fields.

    Principal ids, article ids and correlation ids all go through here so a
    log line can be joined with others without exposing the raw identifier.
    """
    text = str(value or "").strip()
    if not text:
        return f"{prefix}-missing"

    digest = hashlib.sha256(text.encode("utf-8")).hexdigest()[:12]
    return f"{prefix}-{digest}"


def safe_field_names(fields: Any) -> str:
    """Render field names for a log line without their submitted values."""
    names = sorted(str(name) for name in fields or ())
    return ",".join(names) if names else "-"
