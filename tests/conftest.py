"""Shared fixtures."""

from collections.abc import Iterator
from datetime import datetime, timezone

import pytest
from pydantic import SecretStr
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from inbox_relay.accounts.models import Account, VisibilityTier
from inbox_relay.accounts.store.sql import SqlAccountStore
from inbox_relay.email.connectors.base import MailboxConnector
from inbox_relay.email.models import Email, EmailAddress, EmailSummary
from inbox_relay.exceptions import RemoteError

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class FakeConnector(MailboxConnector):
    """In-memory connector recording how it was used."""

    def __init__(self, refresh_token: SecretStr, messages: list[Email], fail: bool) -> None:
        self.refresh_token = refresh_token
        self.messages = messages
        self.fail = fail
        self.connected = False
        self.connect_calls = 0
        self.disconnect_calls = 0

    def connect(self) -> None:
        self.connect_calls += 1
        self.connected = True

    def disconnect(self) -> None:
        self.disconnect_calls += 1
        self.connected = False

    def list_recent(self, limit: int) -> list[EmailSummary]:
        if self.fail:
            raise RemoteError("Gmail request failed while trying to list messages", status=401)
        assert self.connected
        return list(self.messages[:limit])

    def get_message(self, message_id: str) -> Email:
        if self.fail:
            raise RemoteError("Gmail request failed while trying to fetch message", status=404)
        for message in self.messages:
            if message.id == message_id:
                return message
        raise RemoteError("Gmail request failed while trying to fetch message", status=404)


class FakeConnectorFactory:
    """Connector factory handing out FakeConnectors."""

    def __init__(self) -> None:
        self.created: list[FakeConnector] = []
        self.fail = False
        self.messages = [
            Email(
                id=f"msg-{i}",
                subject=f"Subject {i}",
                sender=EmailAddress(name="Sender", address="sender@example.com"),
                date=NOW,
                snippet=f"Snippet {i}",
                body_plain=f"Body {i}",
            )
            for i in range(15)
        ]

    def __call__(self, refresh_token: SecretStr) -> FakeConnector:
        connector = FakeConnector(refresh_token, self.messages, self.fail)
        self.created.append(connector)
        return connector


@pytest.fixture
def store() -> Iterator[SqlAccountStore]:
    """An empty SQLite in-memory account store."""
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    sql_store = SqlAccountStore(engine)
    sql_store.create_schema()
    yield sql_store
    sql_store.dispose()


@pytest.fixture
def connectors() -> FakeConnectorFactory:
    return FakeConnectorFactory()


@pytest.fixture
def premium_account() -> Account:
    return Account(
        email="a@x.com",
        refresh_token=SecretStr("refresh-a"),
        tier=VisibilityTier.PREMIUM,
        created_at=NOW,
        last_accessed_at=NOW,
    )


@pytest.fixture
def public_account() -> Account:
    return Account(
        email="pub@x.com",
        refresh_token=SecretStr("refresh-pub"),
        tier=VisibilityTier.PUBLIC,
        created_at=NOW,
        last_accessed_at=NOW,
    )
