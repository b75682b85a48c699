"""
catalog/store.py -- SQLAlchemy-backed persistence layer for catalog articles.

Uses SQLAlchemy Core (not ORM) so the Article dataclass in catalog/models.py
remains the authoritative domain representation.

Pattern: Repository + Data Mapper. ArticleStore is the repository;
_row_to_article is the mapper. Route handlers never touch SQL directly.

ArticleRepository is the capability the API depends on: get_article,
create_article and list_articles.

Every SQLAlchemyError is re-raised as StorageFailure so the API can answer
with a 500 without knowing which database sits underneath.

Usage:
    store = ArticleStore()                                # SQLite default
    store = ArticleStore("postgresql://user:pw@host/db")  # PostgreSQL
    article_id = store.create_article(Article(title="Book", description="d", price=10))
    articles = store.list_articles()
    store.close()
"""

import logging
from datetime import datetime, timezone
from typing import Optional, Protocol

from sqlalchemy import Column, Float, Integer, MetaData, String, Table, Text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from catalog.models import Article
from core.db import make_engine
from core.errors import StorageFailure

logger = logging.getLogger("tienda.catalog")

_DEFAULT_DB_URL = "sqlite:///tienda.db"

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

_articles = Table(
    "articles",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("title", String(255), nullable=False),
    Column("description", Text, nullable=False),
    Column("price", Float, nullable=False),
    Column("created_at", String(32), nullable=False),
)


class ArticleRepository(Protocol):
    def get_article(self, article_id: int) -> Optional[Article]: ...

    def create_article(self, article: Article) -> int: ...

    def list_articles(self) -> list[Article]: ...


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class ArticleStore:
    def __init__(self, db_url: str = _DEFAULT_DB_URL) -> None:
        self.engine: Engine = make_engine(db_url)
        metadata.create_all(self.engine)

    def create_article(self, article: Article) -> int:
        """Insert an article and return its new ID."""
        try:
            with self.engine.connect() as conn:
                result = conn.execute(
                    _articles.insert().values(
                        title=article.title,
                        description=article.description,
                        price=article.price,
                        created_at=_now_iso(),
                    )
                )
                conn.commit()
                return result.inserted_primary_key[0]
        except SQLAlchemyError as exc:
            logger.error("Article insert failed: %s", exc)
            raise StorageFailure() from exc

    def get_article(self, article_id: int) -> Optional[Article]:
        """Return the article with this ID, or None."""
        try:
            with self.engine.connect() as conn:
                row = conn.execute(_articles.select().where(_articles.c.id == article_id)).fetchone()
        except SQLAlchemyError as exc:
            logger.error("Article lookup failed: %s", exc)
            raise StorageFailure() from exc
        return _row_to_article(row) if row is not None else None

    def list_articles(self) -> list[Article]:
        """Return all articles in insertion order."""
        try:
            with self.engine.connect() as conn:
                rows = conn.execute(_articles.select().order_by(_articles.c.id)).fetchall()
        except SQLAlchemyError as exc:
            logger.error("Article listing failed: %s", exc)
            raise StorageFailure() from exc
        return [_row_to_article(r) for r in rows]

    def close(self) -> None:
        self.engine.dispose()


def _row_to_article(row) -> Article:
    return Article(
        id=row.id,
        title=row.title,
        description=row.description,
        price=row.price,
        created_at=row.created_at,
    )
