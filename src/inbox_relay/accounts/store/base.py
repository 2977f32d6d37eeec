"""Abstract base class for account stores."""

from abc import ABC, abstractmethod

from inbox_relay.accounts.models import (
    Account,
    AccountFilter,
    AccountSummary,
    VisibilityTier,
)


class AccountStore(ABC):
    """Abstract interface for persistent account storage.

    Implementations normalize every email argument before querying and keep
    exactly one record per normalized email. Unreachable storage is reported
    with StoreUnavailableError; a missing record is reported as None.
    """

    @abstractmethod
    def find_by_email(self, email: str) -> Account | None:
        """Look up an account by email.

        Args:
            email: Email address (normalized before lookup).

        Returns:
            The account, or None if no account has this email.

        Raises:
            StoreUnavailableError: If the store cannot be reached.
        """
        ...

    @abstractmethod
    def upsert_by_email(self, email: str, refresh_token: str | None = None) -> Account:
        """Create or refresh an account in a single atomic operation.

        With a refresh token the account is inserted, or its credential is
        replaced (last writer wins). Without one only the bookkeeping fields
        of an existing account are updated and the stored credential is kept.

        Args:
            email: Email address (normalized before writing).
            refresh_token: New delegated credential, or None if the provider
                did not reissue one.

        Returns:
            The account as stored after the write.

        Raises:
            MissingCredentialError: If no refresh token is given and no account exists.
            StoreUnavailableError: If the store cannot be reached.
        """
        ...

    @abstractmethod
    def update_last_accessed(self, email: str) -> None:
        """Set last_accessed_at to now. No-op if the account does not exist."""
        ...

    @abstractmethod
    def set_visibility_tier(self, email: str, tier: VisibilityTier) -> Account | None:
        """Set the visibility tier of an account.

        Returns:
            The updated account, or None if no account has this email.
        """
        ...

    @abstractmethod
    def list_all(self, account_filter: AccountFilter | None = None) -> list[AccountSummary]:
        """List account summaries matching a filter (all accounts when None)."""
        ...

    def create_schema(self) -> None:
        """Create any storage structures the store needs. No-op by default."""

    def dispose(self) -> None:
        """Release resources held by the store. No-op by default."""

    def ping(self) -> None:
        """Check that the store is reachable.

        Raises:
            StoreUnavailableError: If the store cannot be reached.
        """
        self.list_all(AccountFilter(tiers=frozenset(), newest_first=False))
