"""Administrative toggling of account visibility tiers."""

import logging

from inbox_relay.accounts.models import Account, VisibilityTier, normalize_email
from inbox_relay.accounts.store.base import AccountStore
from inbox_relay.exceptions import AccountNotFoundError

logger = logging.getLogger(__name__)


class VisibilityAdministrator:
    """Moves accounts between the PUBLIC and PREMIUM tiers.

    Callers are responsible for checking that the requester is an
    administrator before calling into this class.
    """

    def __init__(self, store: AccountStore) -> None:
        self._store = store

    def set_tier(self, email: str, tier: VisibilityTier) -> Account:
        """Set the visibility tier of an account. Idempotent.

        Raises:
            AccountNotFoundError: If no account has this email.
            StoreUnavailableError: If the store cannot be reached.
        """
        email = normalize_email(email)
        account = self._store.set_visibility_tier(email, tier)
        if account is None:
            raise AccountNotFoundError(email)
        logger.info("Account tier set (email=%s, tier=%s)", email, tier.value)
        return account

    def lock(self, email: str) -> Account:
        """Make an account PREMIUM."""
        return self.set_tier(email, VisibilityTier.PREMIUM)

    def unlock(self, email: str) -> Account:
        """Make an account PUBLIC."""
        return self.set_tier(email, VisibilityTier.PUBLIC)
