"""In-memory repository used for local development and tests."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from threading import Lock
from uuid import uuid4

from blog_api.repositories.base import ArticleRecord, ArticleRepository

_MUTABLE_FIELDS = frozenset({"title", "body"})


@dataclass(slots=True)
class InMemoryStore(ArticleRepository):
    """Simple, deterministic persistence layer.

    Records are stored by id. Reads hand out copies so callers cannot mutate
    stored state outside of ``update_article``.
    """

    articles: dict[str, ArticleRecord] = field(default_factory=dict)
    article_write_count: int = 0
    _lock: Lock = field(default_factory=Lock, repr=False, compare=False)

    def create_article(self, *, owner_id: str, title: str, body: str) -> ArticleRecord:
        now = datetime.now(UTC)
        article = ArticleRecord(
            id=str(uuid4()),
            title=title,
            body=body,
            owner_id=owner_id,
            created_at=now,
            updated_at=now,
        )
        with self._lock:
            self.articles[article.id] = article
            self.article_write_count += 1
        return replace(article)

    def get_article(self, article_id: str) -> ArticleRecord | None:
        article = self.articles.get(article_id)
        return replace(article) if article is not None else None

    def list_articles(self) -> list[ArticleRecord]:
        with self._lock:
            articles = [replace(record) for record in self.articles.values()]
        articles.sort(key=lambda record: (record.created_at, record.id))
        return articles

    def update_article(self, article_id: str, *, changes: dict[str, str]) -> ArticleRecord | None:
        unknown = set(changes) - _MUTABLE_FIELDS
        if unknown:
            raise ValueError(f"Unsupported article fields: {sorted(unknown)}")

        with self._lock:
            article = self.articles.get(article_id)
            if article is None:
                return None
            for name, value in changes.items():
                setattr(article, name, value)
            article.updated_at = datetime.now(UTC)
            self.article_write_count += 1
            return replace(article)

    def delete_article(self, article_id: str) -> bool:
        with self._lock:
            removed = self.articles.pop(article_id, None)
            if removed is None:
                return False
            self.article_write_count += 1
            return True

    def count_articles(self) -> int:
        return len(self.articles)


__all__ = ["InMemoryStore"]
