"""Credential provisioning after a completed provider authorization."""

import logging
from enum import Enum

from pydantic import BaseModel

from inbox_relay.accounts.models import Account, normalize_email
from inbox_relay.accounts.store.base import AccountStore
from inbox_relay.exceptions import StoreUnavailableError

logger = logging.getLogger(__name__)


class ProvisionStatus(str, Enum):
    """Outcome of a provisioning call."""

    STORED = "stored"
    PRESERVED = "preserved"
    DEGRADED = "degraded"


class ProvisionResult(BaseModel):
    """Result of provisioning an account.

    Attributes:
        email: Normalized email that was provisioned.
        status: STORED when a new credential was written, PRESERVED when the
            provider sent none and the stored one was kept, DEGRADED when the
            store was unreachable and nothing was persisted.
        account: The stored account, or None when degraded.
    """

    email: str
    status: ProvisionStatus
    account: Account | None = None

    @property
    def degraded(self) -> bool:
        return self.status is ProvisionStatus.DEGRADED


class CredentialProvisioner:
    """Turns a completed external authorization into a durable account."""

    def __init__(self, store: AccountStore) -> None:
        self._store = store

    def provision(self, email: str, refresh_token: str | None) -> ProvisionResult:
        """Create or refresh the account for an authorized email.

        A missing refresh token never overwrites a stored one. If the store
        is unreachable the result is DEGRADED instead of an error, so the
        caller can still bind the session.

        Args:
            email: Email reported by the provider.
            refresh_token: Delegated credential, or None if the provider did
                not reissue one.

        Returns:
            The provisioning result.

        Raises:
            MissingCredentialError: If no refresh token was issued and the
                account does not exist yet.
        """
        email = normalize_email(email)

        try:
            account = self._store.upsert_by_email(email, refresh_token or None)
        except StoreUnavailableError as e:
            logger.warning(
                "Account store unavailable, session will be bound without saving (email=%s): %s",
                email,
                e,
            )
            return ProvisionResult(email=email, status=ProvisionStatus.DEGRADED)

        status = ProvisionStatus.STORED if refresh_token else ProvisionStatus.PRESERVED
        logger.info("Account provisioned (email=%s, status=%s)", email, status.value)
        return ProvisionResult(email=email, status=status, account=account)
