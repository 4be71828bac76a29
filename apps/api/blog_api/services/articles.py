"""Article service layer.

Every operation takes the caller's id explicitly. Checks run in a fixed
order: the caller is already authenticated when a method is called, then the
ownership scope is applied to the lookup, then writes are validated.
"""

from __future__ import annotations

import logging
from typing import Any, NoReturn

from blog_api.core.logging_safety import safe_field_names, safe_log_identifier
from blog_api.domain.article_validation import (
    ARTICLE_FIELDS,
    extract_submitted_attributes,
    validate_article_attributes,
)
from blog_api.domain.ownership import OwnershipScope
from blog_api.errors import not_found_or_foreign, validation_failed
from blog_api.repositories.base import ArticleRecord, ArticleRepository
from blog_api.schemas.article import Article

logger = logging.getLogger(__name__)


class ArticleService:
    def __init__(self, store: ArticleRepository) -> None:
        self._store = store

    def list_articles(self, *, owner_id: str) -> list[Article]:
        scope = OwnershipScope(owner_id)
        return [self._to_article(record) for record in scope.filter(self._store.list_articles())]

    def get_article(self, *, owner_id: str, article_id: str) -> Article:
        return self._to_article(self._scoped_record(owner_id, article_id))

    def create_article(self, *, owner_id: str, payload: Any) -> Article:
        submitted, envelope_errors = extract_submitted_attributes(payload)
        if envelope_errors:
            self._reject(owner_id, None, envelope_errors)

        result = validate_article_attributes(submitted)
        if not result.accepted or result.attributes is None:
            self._reject(owner_id, None, result.errors)

        record = self._store.create_article(
            owner_id=owner_id,
            title=result.attributes.title,
            body=result.attributes.body,
        )
        logger.info(
            "article.created principal_id=%s article_id=%s",
            safe_log_identifier(owner_id, prefix="pid"),
            safe_log_identifier(record.id, prefix="aid"),
        )
        return self._to_article(record)

    def update_article(self, *, owner_id: str, article_id: str, payload: Any) -> Article:
        current = self._scoped_record(owner_id, article_id)

        submitted, envelope_errors = extract_submitted_attributes(payload)
        if envelope_errors:
            self._reject(owner_id, article_id, envelope_errors)

        proposed = {name: getattr(current, name) for name in ARTICLE_FIELDS}
        proposed.update(submitted)
        result = validate_article_attributes(proposed)
        if not result.accepted:
            self._reject(owner_id, article_id, result.errors)

        changes = {name: value for name, value in submitted.items() if value != getattr(current, name)}
        if not changes:
            return self._to_article(current)

        updated = self._store.update_article(article_id, changes=changes)
        if updated is None:
            # Removed between the scoped lookup and the write.
            raise not_found_or_foreign()

        logger.info(
            "article.updated principal_id=%s article_id=%s fields=%s",
            safe_log_identifier(owner_id, prefix="pid"),
            safe_log_identifier(article_id, prefix="aid"),
            safe_field_names(changes),
        )
        return self._to_article(updated)

    def delete_article(self, *, owner_id: str, article_id: str) -> None:
        self._scoped_record(owner_id, article_id)
        if not self._store.delete_article(article_id):
            raise not_found_or_foreign()

        logger.info(
            "article.deleted principal_id=%s article_id=%s",
            safe_log_identifier(owner_id, prefix="pid"),
            safe_log_identifier(article_id, prefix="aid"),
        )

    def _scoped_record(self, owner_id: str, article_id: str) -> ArticleRecord:
        scope = OwnershipScope(owner_id)
        return scope.require(self._store.get_article(article_id), resource_id=article_id)

    @staticmethod
    def _reject(owner_id: str, article_id: str | None, errors: dict[str, list[str]]) -> NoReturn:
        logger.info(
            "article.validation_failed principal_id=%s article_id=%s fields=%s",
            safe_log_identifier(owner_id, prefix="pid"),
            safe_log_identifier(article_id, prefix="aid"),
            safe_field_names(errors),
        )
        raise validation_failed(errors)

    @staticmethod
    def _to_article(record: ArticleRecord) -> Article:
        return Article(
            id=record.id,
            title=record.title,
            body=record.body,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )
