"""Account access control and credential lifecycle."""

from inbox_relay.accounts.delegation import DelegatedCaller
from inbox_relay.accounts.models import (
    Account,
    AccountFilter,
    AccountSummary,
    SessionIdentity,
    VisibilityTier,
    normalize_email,
)
from inbox_relay.accounts.policy import AccessGrant, AccessPolicy, GrantBasis
from inbox_relay.accounts.provisioning import (
    CredentialProvisioner,
    ProvisionResult,
    ProvisionStatus,
)
from inbox_relay.accounts.service import AccountService
from inbox_relay.accounts.store import AccountStore, SqlAccountStore
from inbox_relay.accounts.visibility import VisibilityAdministrator

__all__ = [
    "AccessGrant",
    "AccessPolicy",
    "Account",
    "AccountFilter",
    "AccountService",
    "AccountStore",
    "AccountSummary",
    "CredentialProvisioner",
    "DelegatedCaller",
    "GrantBasis",
    "ProvisionResult",
    "ProvisionStatus",
    "SessionIdentity",
    "SqlAccountStore",
    "VisibilityAdministrator",
    "VisibilityTier",
    "normalize_email",
]
