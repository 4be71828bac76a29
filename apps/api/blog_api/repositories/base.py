"""Persistence interface for article records."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime


@dataclass(slots=True)
class ArticleRecord:
    id: str
    title: str
    body: str
    owner_id: str
    created_at: datetime
    updated_at: datetime


class ArticleRepository(ABC):
    """Storage collaborator. Each write method is a single atomic call."""

    @abstractmethod
    def create_article(self, *, owner_id: str, title: str, body: str) -> ArticleRecord:
        """Persist a new article owned by ``owner_id``."""

    @abstractmethod
    def get_article(self, article_id: str) -> ArticleRecord | None:
        """Return the article with ``article_id`` regardless of owner, or ``None``."""

    @abstractmethod
    def list_articles(self) -> list[ArticleRecord]:
        """Return all articles ordered by creation time, then id."""

    @abstractmethod
    def update_article(self, article_id: str, *, changes: dict[str, str]) -> ArticleRecord | None:
        """Apply ``changes`` to the article; fields not in ``changes`` are left untouched."""

    @abstractmethod
    def delete_article(self, article_id: str) -> bool:
        """Remove the article; return whether a record was removed."""

    @abstractmethod
    def count_articles(self) -> int:
        """Return the number of stored articles."""


__all__ = ["ArticleRecord", "ArticleRepository"]
