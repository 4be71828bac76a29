"""Ownership scope applied to every article lookup."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Protocol, TypeVar, cast

from blog_api.core.logging_safety import safe_log_identifier
from blog_api.errors import not_found_or_foreign

logger = logging.getLogger(__name__)


class OwnedRecord(Protocol):
    id: str
    owner_id: str


RecordT = TypeVar("RecordT", bound=OwnedRecord)


class ScopeDecision(str, Enum):
    OWNED = "owned"
    ABSENT = "absent"
    FOREIGN = "foreign"


@dataclass(frozen=True, slots=True)
class OwnershipScope:
    """Restricts visibility and mutability of records to a single owner.

    Absent and foreign records are both reported to callers as not found so
    that resource ids cannot be enumerated across owners.
    """

    owner_id: str

    def permits(self, record: OwnedRecord) -> bool:
        return record.owner_id == self.owner_id

    def filter(self, records: Iterable[RecordT]) -> list[RecordT]:
        return [record for record in records if self.permits(record)]

    def classify(self, record: OwnedRecord | None) -> ScopeDecision:
        if record is None:
            return ScopeDecision.ABSENT
        if not self.permits(record):
            return ScopeDecision.FOREIGN
        return ScopeDecision.OWNED

    def require(self, record: RecordT | None, *, resource_id: str) -> RecordT:
        decision = self.classify(record)
        if decision is not ScopeDecision.OWNED:
            logger.info(
                "article.scope_miss principal_id=%s article_id=%s reason=%s",
                safe_log_identifier(self.owner_id, prefix="pid"),
                safe_log_identifier(resource_id, prefix="aid"),
                decision.value,
            )
            raise not_found_or_foreign()
        return cast(RecordT, record)


__all__ = ["OwnedRecord", "OwnershipScope", "ScopeDecision"]
