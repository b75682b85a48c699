"""Unit tests for auth/store.py and catalog/store.py -- the SQLAlchemy repositories.

Covers:
- IdentityStore: insert/lookup, UNIQUE username -> DuplicateIdentity, listing
- ArticleStore: insert/get/list in insertion order
- Both: database errors surface as StorageFailure
"""

import pytest
from sqlalchemy import text

from auth.models import Identity, Role
from auth.store import IdentityStore
from catalog.models import Article
from catalog.store import ArticleStore
from core.errors import DuplicateIdentity, StorageFailure

# ---------------------------------------------------------------------------
# Shared fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def identity_store():
    s = IdentityStore("sqlite:///:memory:")
    yield s
    s.close()


@pytest.fixture
def article_store():
    s = ArticleStore("sqlite:///:memory:")
    yield s
    s.close()


def _drop(engine, table: str) -> None:
    with engine.connect() as conn:
        conn.execute(text(f"DROP TABLE {table}"))  # nosemgrep -- constant table name
        conn.commit()


# ---------------------------------------------------------------------------
# IdentityStore
# ---------------------------------------------------------------------------


class TestIdentityStore:
    def test_create_and_get(self, identity_store: IdentityStore) -> None:
        new_id = identity_store.create_identity(Identity(username="alice", hashed_password="$2b$hash", role=Role.admin))
        found = identity_store.get_by_username("alice")
        assert found is not None
        assert found.id == new_id
        assert found.role is Role.admin
        assert found.hashed_password == "$2b$hash"
        assert found.created_at

    def test_role_defaults_to_standard(self, identity_store: IdentityStore) -> None:
        identity_store.create_identity(Identity(username="bob", hashed_password="h"))
        assert identity_store.get_by_username("bob").role is Role.standard

    def test_unknown_username_returns_none(self, identity_store: IdentityStore) -> None:
        assert identity_store.get_by_username("nobody") is None

    def test_lookup_is_case_sensitive(self, identity_store: IdentityStore) -> None:
        identity_store.create_identity(Identity(username="Alice", hashed_password="h"))
        assert identity_store.get_by_username("alice") is None

    def test_duplicate_username_raises(self, identity_store: IdentityStore) -> None:
        identity_store.create_identity(Identity(username="alice", hashed_password="h1"))
        with pytest.raises(DuplicateIdentity):
            identity_store.create_identity(Identity(username="alice", hashed_password="h2", role=Role.admin))
        # The original record is untouched.
        assert identity_store.get_by_username("alice").hashed_password == "h1"
        assert len(identity_store.list_identities()) == 1

    def test_list_ordered_by_username(self, identity_store: IdentityStore) -> None:
        for name in ("carol", "alice", "bob"):
            identity_store.create_identity(Identity(username=name, hashed_password="h"))
        assert [i.username for i in identity_store.list_identities()] == ["alice", "bob", "carol"]

    def test_backend_failure_is_storage_failure(self, identity_store: IdentityStore) -> None:
        _drop(identity_store.engine, "identities")
        with pytest.raises(StorageFailure):
            identity_store.get_by_username("alice")
        with pytest.raises(StorageFailure):
            identity_store.create_identity(Identity(username="alice", hashed_password="h"))


# ---------------------------------------------------------------------------
# ArticleStore
# ---------------------------------------------------------------------------


class TestArticleStore:
    def test_create_and_get(self, article_store: ArticleStore) -> None:
        article_id = article_store.create_article(Article(title="Book", description="d", price=10))
        found = article_store.get_article(article_id)
        assert found is not None
        assert (found.title, found.description, found.price) == ("Book", "d", 10.0)
        assert found.created_at

    def test_get_missing_returns_none(self, article_store: ArticleStore) -> None:
        assert article_store.get_article(99999) is None

    def test_list_in_insertion_order(self, article_store: ArticleStore) -> None:
        assert article_store.list_articles() == []
        for title in ("Zeta", "Alpha", "Mid"):
            article_store.create_article(Article(title=title, description="d", price=1.5))
        assert [a.title for a in article_store.list_articles()] == ["Zeta", "Alpha", "Mid"]

    def test_backend_failure_is_storage_failure(self, article_store: ArticleStore) -> None:
        _drop(article_store.engine, "articles")
        with pytest.raises(StorageFailure):
            article_store.list_articles()
        with pytest.raises(StorageFailure):
            article_store.create_article(Article(title="Book", description="d", price=10))
