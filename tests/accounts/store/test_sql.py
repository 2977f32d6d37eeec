"""Tests for SqlAccountStore."""

import time
from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from inbox_relay.accounts.models import AccountFilter, VisibilityTier
from inbox_relay.accounts.store.sql import SqlAccountStore
from inbox_relay.exceptions import (
    ConfigError,
    MissingCredentialError,
    StoreError,
    StoreUnavailableError,
)


class TestUpsert:
    def test_creates_public_account(self, store: SqlAccountStore) -> None:
        account = store.upsert_by_email("user@example.com", "token-1")

        assert account.email == "user@example.com"
        assert account.refresh_token.get_secret_value() == "token-1"
        assert account.tier is VisibilityTier.PUBLIC
        assert account.created_at.tzinfo is not None

    def test_normalizes_email(self, store: SqlAccountStore) -> None:
        store.upsert_by_email("  User@Example.COM ", "token-1")

        found = store.find_by_email("user@example.com")

        assert found is not None
        assert found.email == "user@example.com"

    def test_replaces_credential(self, store: SqlAccountStore) -> None:
        store.upsert_by_email("user@example.com", "token-1")

        account = store.upsert_by_email("USER@example.com", "token-2")

        assert account.refresh_token.get_secret_value() == "token-2"
        assert len(store.list_all()) == 1

    def test_absent_credential_preserves_stored_one(self, store: SqlAccountStore) -> None:
        first = store.upsert_by_email("user@example.com", "token-1")
        time.sleep(0.01)

        account = store.upsert_by_email("user@example.com", None)

        assert account.refresh_token.get_secret_value() == "token-1"
        assert account.last_accessed_at >= first.last_accessed_at
        assert account.created_at == first.created_at

    def test_absent_credential_without_account_raises(self, store: SqlAccountStore) -> None:
        with pytest.raises(MissingCredentialError) as exc_info:
            store.upsert_by_email("new@example.com", None)

        assert exc_info.value.email == "new@example.com"
        assert store.find_by_email("new@example.com") is None

    def test_row_missing_after_write_raises_store_error(self, store: SqlAccountStore) -> None:
        with patch.object(store, "_get_record", return_value=None):
            with pytest.raises(StoreError, match="missing after upsert"):
                store.upsert_by_email("user@example.com", "token-1")

    def test_upsert_keeps_tier(self, store: SqlAccountStore) -> None:
        store.upsert_by_email("user@example.com", "token-1")
        store.set_visibility_tier("user@example.com", VisibilityTier.PREMIUM)

        account = store.upsert_by_email("user@example.com", "token-2")

        assert account.tier is VisibilityTier.PREMIUM


class TestFind:
    def test_missing_account_returns_none(self, store: SqlAccountStore) -> None:
        assert store.find_by_email("nobody@example.com") is None

    def test_unreachable_database_raises_unavailable(self, store: SqlAccountStore) -> None:
        error = OperationalError("SELECT", {}, Exception("connection refused"))
        with patch.object(store, "_sessions", side_effect=error):
            with pytest.raises(StoreUnavailableError):
                store.find_by_email("user@example.com")

    def test_other_database_errors_raise_store_error(self, store: SqlAccountStore) -> None:
        error = IntegrityError("INSERT", {}, Exception("constraint"))
        with patch.object(store, "_sessions", side_effect=error):
            with pytest.raises(StoreError) as exc_info:
                store.find_by_email("user@example.com")

        assert not isinstance(exc_info.value, StoreUnavailableError)


class TestLastAccessed:
    def test_updates_timestamp(self, store: SqlAccountStore) -> None:
        created = store.upsert_by_email("user@example.com", "token-1")
        time.sleep(0.01)

        store.update_last_accessed("USER@example.com")

        account = store.find_by_email("user@example.com")
        assert account is not None
        assert account.last_accessed_at > created.last_accessed_at

    def test_missing_account_is_noop(self, store: SqlAccountStore) -> None:
        store.update_last_accessed("nobody@example.com")

        assert store.list_all() == []


class TestVisibilityTier:
    def test_sets_premium(self, store: SqlAccountStore) -> None:
        store.upsert_by_email("user@example.com", "token-1")

        account = store.set_visibility_tier("user@example.com", VisibilityTier.PREMIUM)

        assert account is not None
        assert account.tier is VisibilityTier.PREMIUM

    def test_same_tier_twice(self, store: SqlAccountStore) -> None:
        store.upsert_by_email("user@example.com", "token-1")

        store.set_visibility_tier("user@example.com", VisibilityTier.PREMIUM)
        account = store.set_visibility_tier("user@example.com", VisibilityTier.PREMIUM)

        assert account is not None
        assert account.tier is VisibilityTier.PREMIUM

    def test_missing_account_returns_none(self, store: SqlAccountStore) -> None:
        assert store.set_visibility_tier("nobody@example.com", VisibilityTier.PREMIUM) is None


class TestListAll:
    @pytest.fixture
    def populated(self, store: SqlAccountStore) -> SqlAccountStore:
        for email in ["b@x.com", "a@x.com", "c@x.com"]:
            store.upsert_by_email(email, f"token-{email}")
            time.sleep(0.01)
        store.set_visibility_tier("b@x.com", VisibilityTier.PREMIUM)
        return store

    def test_all_sorted_by_email(self, populated: SqlAccountStore) -> None:
        emails = [a.email for a in populated.list_all()]

        assert emails == ["a@x.com", "b@x.com", "c@x.com"]

    def test_newest_first(self, populated: SqlAccountStore) -> None:
        emails = [a.email for a in populated.list_all(AccountFilter(newest_first=True))]

        assert emails == ["c@x.com", "a@x.com", "b@x.com"]

    def test_public_only(self, populated: SqlAccountStore) -> None:
        result = populated.list_all(AccountFilter(tiers=frozenset({VisibilityTier.PUBLIC})))

        assert [a.email for a in result] == ["a@x.com", "c@x.com"]

    def test_public_plus_own_premium(self, populated: SqlAccountStore) -> None:
        result = populated.list_all(
            AccountFilter(tiers=frozenset({VisibilityTier.PUBLIC}), include_email="B@x.com")
        )

        assert [a.email for a in result] == ["a@x.com", "b@x.com", "c@x.com"]

    def test_summaries_carry_no_credential(self, populated: SqlAccountStore) -> None:
        summary = populated.list_all()[0]

        assert not hasattr(summary, "refresh_token")
        assert "token" not in summary.model_dump_json()


class TestLifecycle:
    def test_ping(self, store: SqlAccountStore) -> None:
        store.ping()

    def test_ping_unreachable(self, store: SqlAccountStore) -> None:
        error = OperationalError("SELECT 1", {}, Exception("connection refused"))
        with patch.object(store, "_engine") as mock_engine:
            mock_engine.connect.side_effect = error
            with pytest.raises(StoreUnavailableError):
                store.ping()

    def test_from_url_sqlite(self, tmp_path) -> None:
        db_store = SqlAccountStore.from_url(f"sqlite:///{tmp_path / 'relay.db'}")
        db_store.create_schema()

        db_store.upsert_by_email("user@example.com", "token-1")

        assert db_store.find_by_email("user@example.com") is not None
        db_store.dispose()

    def test_unsupported_dialect(self) -> None:
        engine = MagicMock()
        engine.dialect.name = "oracle"

        with pytest.raises(ConfigError, match="oracle"):
            SqlAccountStore(engine)
