"""Field validation rules for article attribute sets.

Validation is pure: it looks only at the attributes it is handed. Create
passes the submitted attributes; update passes the stored attributes
overlaid with the submitted ones, so both paths go through the same rules.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from blog_api.schemas.article import ArticleAttributes

ARTICLE_FIELDS: tuple[str, ...] = ("title", "body")
MAX_LENGTHS: Mapping[str, int] = {"title": 255, "body": 100_000}
ENVELOPE_KEY = "article"

BLANK_MESSAGE = "can't be blank"
TYPE_MESSAGE = "must be a string"
REQUIRED_MESSAGE = "is required"

FieldErrors = dict[str, list[str]]


@dataclass(frozen=True, slots=True)
class ValidationResult:
    attributes: ArticleAttributes | None = None
    errors: FieldErrors = field(default_factory=dict)

    @property
    def accepted(self) -> bool:
        return not self.errors


def extract_submitted_attributes(payload: Any) -> tuple[dict[str, Any], FieldErrors]:
    """Unwrap the ``{"article": {...}}`` envelope into the submitted known fields.

    Only keys that were actually submitted are returned, so an update can tell
    an omitted field apart from one set to an empty value.
    """
    if not isinstance(payload, Mapping):
        return {}, {ENVELOPE_KEY: [REQUIRED_MESSAGE]}

    article = payload.get(ENVELOPE_KEY)
    if not isinstance(article, Mapping):
        return {}, {ENVELOPE_KEY: [REQUIRED_MESSAGE]}

    return {name: article[name] for name in ARTICLE_FIELDS if name in article}, {}


def validate_article_attributes(proposed: Mapping[str, Any]) -> ValidationResult:
    """Check a full proposed attribute set and return accepted attributes or field errors."""
    errors: FieldErrors = {}
    candidate = {name: proposed.get(name) for name in ARTICLE_FIELDS}

    try:
        attributes = ArticleAttributes.model_validate(candidate)
    except ValidationError as exc:
        attributes = None
        for error in exc.errors():
            loc = error.get("loc") or (ENVELOPE_KEY,)
            messages = errors.setdefault(str(loc[0]), [])
            if TYPE_MESSAGE not in messages:
                messages.append(TYPE_MESSAGE)

    for name in ARTICLE_FIELDS:
        if name in errors:
            continue
        messages = _field_violations(candidate[name], max_length=MAX_LENGTHS[name])
        if messages:
            errors[name] = messages

    if errors:
        return ValidationResult(attributes=None, errors=errors)
    return ValidationResult(attributes=attributes, errors={})


def _field_violations(value: str | None, *, max_length: int) -> list[str]:
    if value is None or not value.strip():
        return [BLANK_MESSAGE]
    if len(value) > max_length:
        return [f"is too long (maximum is {max_length} characters)"]
    return []


__all__ = [
    "ARTICLE_FIELDS",
    "FieldErrors",
    "MAX_LENGTHS",
    "ValidationResult",
    "extract_submitted_attributes",
    "validate_article_attributes",
]
