"""Account service tying the store, access policy and delegated calls together."""

import logging

from pydantic import BaseModel

from inbox_relay.accounts.delegation import ConnectorFactory, DelegatedCaller
from inbox_relay.accounts.models import (
    Account,
    AccountFilter,
    AccountSummary,
    SessionIdentity,
    VisibilityTier,
)
from inbox_relay.accounts.policy import AccessGrant, AccessPolicy, visibility_filter
from inbox_relay.accounts.provisioning import CredentialProvisioner, ProvisionResult
from inbox_relay.accounts.store.base import AccountStore
from inbox_relay.accounts.visibility import VisibilityAdministrator
from inbox_relay.defaults import DEFAULT_INBOX_LIMIT
from inbox_relay.email.models import Email, EmailSummary
from inbox_relay.exceptions import AdminRequiredError, StoreError

logger = logging.getLogger(__name__)


class InboxListing(BaseModel):
    """Recent messages of one account."""

    account: AccountSummary
    emails: list[EmailSummary]


class AccountListing(BaseModel):
    """Accounts visible to a session.

    ``degraded`` is True when the store could not be read and the list is
    empty for that reason rather than because nothing is visible.
    """

    accounts: list[AccountSummary]
    degraded: bool = False


class AccountService:
    """Entry point for every account operation exposed by the relay.

    Read operations go through AccessPolicy before any delegated call;
    administrative operations require an admin session.
    """

    def __init__(
        self,
        store: AccountStore,
        connector_factory: ConnectorFactory,
        inbox_limit: int = DEFAULT_INBOX_LIMIT,
    ) -> None:
        """Initialize the account service.

        Args:
            store: Persistent account store.
            connector_factory: Builds a mailbox connector from a refresh token.
            inbox_limit: Number of messages returned by list_inbox().
        """
        self._store = store
        self._policy = AccessPolicy(store)
        self._caller = DelegatedCaller(store, connector_factory)
        self._provisioner = CredentialProvisioner(store)
        self._visibility = VisibilityAdministrator(store)
        self._inbox_limit = inbox_limit

    @property
    def store(self) -> AccountStore:
        return self._store

    def authorize(self, email: str, session: SessionIdentity) -> AccessGrant:
        """Run the access policy for an account.

        Raises:
            AccessDeniedError: If the session may not act on the account.
        """
        return self._policy.authorize(email, session)

    def list_inbox(self, email: str, session: SessionIdentity) -> InboxListing:
        """List recent messages of an account the session may read.

        Raises:
            AccessDeniedError: If the session may not read the account.
            RemoteError: If the provider call fails.
        """
        grant = self.authorize(email, session)
        limit = self._inbox_limit
        emails = self._caller.invoke(grant, lambda connector: connector.list_recent(limit))
        logger.info("Retrieved %d emails (email=%s)", len(emails), grant.account.email)
        return InboxListing(account=grant.account.summary(), emails=emails)

    def get_message(self, email: str, message_id: str, session: SessionIdentity) -> Email:
        """Fetch one message of an account the session may read.

        Raises:
            AccessDeniedError: If the session may not read the account.
            RemoteError: If the provider call fails.
        """
        grant = self.authorize(email, session)
        return self._caller.invoke(grant, lambda connector: connector.get_message(message_id))

    def provision(self, email: str, refresh_token: str | None) -> ProvisionResult:
        """Store the delegated credential from a completed authorization."""
        return self._provisioner.provision(email, refresh_token)

    def list_available(self, session: SessionIdentity) -> AccountListing:
        """List accounts the session may read.

        Degrades to an empty, flagged listing if the store fails.
        """
        try:
            accounts = self._store.list_all(visibility_filter(session))
        except StoreError as e:
            logger.warning("Available accounts unavailable: %s", e)
            return AccountListing(accounts=[], degraded=True)
        return AccountListing(accounts=accounts)

    def list_all(self, session: SessionIdentity) -> list[AccountSummary]:
        """List every account, newest first. Admin only.

        Raises:
            AdminRequiredError: If the session is not an admin.
            StoreError: If the store fails.
        """
        self._require_admin(session)
        logger.info("Admin requested accounts list")
        return self._store.list_all(AccountFilter(newest_first=True))

    def set_tier(self, email: str, tier: VisibilityTier, session: SessionIdentity) -> Account:
        """Change an account's visibility tier. Admin only.

        Raises:
            AdminRequiredError: If the session is not an admin.
            AccountNotFoundError: If no account has this email.
        """
        self._require_admin(session)
        return self._visibility.set_tier(email, tier)

    def _require_admin(self, session: SessionIdentity) -> None:
        if not session.is_admin:
            logger.info("Admin operation refused (user_email=%s)", session.user_email)
            raise AdminRequiredError()
