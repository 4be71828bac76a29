"""Outcome kinds produced by article operations and their transport status."""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType


class OutcomeKind(str, Enum):
    UNAUTHENTICATED = "UNAUTHENTICATED"
    NOT_FOUND_OR_FOREIGN = "NOT_FOUND_OR_FOREIGN"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    UNSUPPORTED_VERSION = "UNSUPPORTED_VERSION"
    INTERNAL = "INTERNAL"
    LISTED = "LISTED"
    FETCHED = "FETCHED"
    CREATED = "CREATED"
    UPDATED = "UPDATED"
    DELETED = "DELETED"


_STATUS_BY_OUTCOME = MappingProxyType(
    {
        OutcomeKind.UNAUTHENTICATED: 401,
        OutcomeKind.NOT_FOUND_OR_FOREIGN: 404,
        OutcomeKind.VALIDATION_FAILED: 422,
        OutcomeKind.UNSUPPORTED_VERSION: 406,
        OutcomeKind.INTERNAL: 500,
        OutcomeKind.LISTED: 200,
        OutcomeKind.FETCHED: 200,
        OutcomeKind.CREATED: 201,
        OutcomeKind.UPDATED: 200,
        OutcomeKind.DELETED: 204,
    }
)


def status_for(outcome: OutcomeKind) -> int:
    """Map an outcome to its HTTP status code.

    The map is total over ``OutcomeKind``; an unknown value is a programming
    error and raises ``KeyError``.
    """
    return _STATUS_BY_OUTCOME[outcome]


__all__ = ["OutcomeKind", "status_for"]
