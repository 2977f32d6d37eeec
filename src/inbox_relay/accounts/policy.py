"""Access policy deciding who may read which account.

Trust is derived from the session identity and the target account's own
visibility tier; there are no per-user permission lists. A request is granted
when any of three predicates holds:

- the session is the account owner (normalized email equality),
- the session is an administrator,
- the account is PUBLIC.

Otherwise the only possible denial for an existing account is
PREMIUM_ACCESS_DENIED.
"""

from __future__ import annotations

import logging
from enum import Enum

from pydantic import BaseModel, ConfigDict

from inbox_relay.accounts.models import (
    Account,
    AccountFilter,
    SessionIdentity,
    VisibilityTier,
    normalize_email,
)
from inbox_relay.accounts.store.base import AccountStore
from inbox_relay.exceptions import AccessDeniedError, DenialReason, StoreError

logger = logging.getLogger(__name__)


class GrantBasis(str, Enum):
    """Which predicate granted access. Informational only."""

    OWNER = "owner"
    ADMIN = "admin"
    PUBLIC = "public"


class AccessGrant(BaseModel):
    """Proof that policy evaluation passed for an account.

    Required by DelegatedCaller; it carries the account but is not itself the
    delegated credential.
    """

    model_config = ConfigDict(frozen=True)

    account: Account
    basis: GrantBasis


def grant_basis(account: Account, session: SessionIdentity) -> GrantBasis | None:
    """Evaluate the three access predicates for an account.

    Returns:
        The first predicate that holds (owner, admin, public), or None if
        access must be denied.
    """
    is_owner = session.user_email is not None and session.user_email == normalize_email(
        account.email
    )
    if is_owner:
        return GrantBasis.OWNER
    if session.is_admin:
        return GrantBasis.ADMIN
    if account.tier is VisibilityTier.PUBLIC:
        return GrantBasis.PUBLIC
    return None


def visibility_filter(session: SessionIdentity) -> AccountFilter:
    """Listing filter matching exactly the accounts a session may read."""
    if session.is_admin:
        return AccountFilter()
    return AccountFilter(
        tiers=frozenset({VisibilityTier.PUBLIC}),
        include_email=session.user_email,
    )


class AccessPolicy:
    """Decides whether a session may act on a target account."""

    def __init__(self, store: AccountStore) -> None:
        self._store = store

    def authorize(self, target_email: str, session: SessionIdentity) -> AccessGrant:
        """Authorize a session to act on the account with the given email.

        Args:
            target_email: Email of the target account (normalized before lookup).
            session: Identity of the requester.

        Returns:
            An AccessGrant for the resolved account.

        Raises:
            AccessDeniedError: With reason SERVICE_UNAVAILABLE if the store
                failed, NOT_FOUND if no such account exists, or
                PREMIUM_ACCESS_DENIED if none of the predicates hold.
        """
        email = normalize_email(target_email)

        try:
            account = self._store.find_by_email(email)
        except StoreError as e:
            logger.warning("Access check skipped, store failed (email=%s): %s", email, e)
            raise AccessDeniedError(email, DenialReason.SERVICE_UNAVAILABLE) from e

        if account is None:
            logger.info("Access denied, account not found (email=%s)", email)
            raise AccessDeniedError(email, DenialReason.NOT_FOUND)

        basis = grant_basis(account, session)
        if basis is None:
            logger.info("Access denied to premium account (email=%s)", email)
            raise AccessDeniedError(email, DenialReason.PREMIUM_ACCESS_DENIED)

        logger.debug("Access granted (email=%s, basis=%s)", email, basis.value)
        return AccessGrant(account=account, basis=basis)
