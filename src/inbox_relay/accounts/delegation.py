"""Delegated calls to the mailbox provider on behalf of an account."""

import logging
from collections.abc import Callable
from typing import TypeVar

from pydantic import SecretStr

from inbox_relay.accounts.policy import AccessGrant
from inbox_relay.accounts.store.base import AccountStore
from inbox_relay.email.connectors.base import MailboxConnector
from inbox_relay.exceptions import StoreError

logger = logging.getLogger(__name__)

T = TypeVar("T")

ConnectorFactory = Callable[[SecretStr], MailboxConnector]


class DelegatedCaller:
    """Runs provider operations as the account owner.

    Every call gets a fresh connector built from the granted account's
    refresh token. Connectors are never reused across calls or accounts.
    """

    def __init__(self, store: AccountStore, connector_factory: ConnectorFactory) -> None:
        """Initialize the caller.

        Args:
            store: Store used for last-accessed bookkeeping.
            connector_factory: Builds a connector from a refresh token.
        """
        self._store = store
        self._connector_factory = connector_factory

    def invoke(self, grant: AccessGrant, operation: Callable[[MailboxConnector], T]) -> T:
        """Run an operation against the provider as the granted account.

        On success the account's last_accessed_at is updated. A failure of
        that update is logged and does not affect the returned result.

        Args:
            grant: Grant issued by AccessPolicy for the target account.
            operation: Callable receiving a connected MailboxConnector.

        Returns:
            Whatever the operation returns.

        Raises:
            RemoteError: If the provider call fails. Not retried.
        """
        account = grant.account
        connector = self._connector_factory(account.refresh_token)

        with connector:
            result = operation(connector)

        self._touch(account.email)
        return result

    def _touch(self, email: str) -> None:
        try:
            self._store.update_last_accessed(email)
        except StoreError as e:
            logger.warning("Could not record last access (email=%s): %s", email, e)
