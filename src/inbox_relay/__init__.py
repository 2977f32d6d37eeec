"""Shared access to delegated mailbox accounts behind a session-scoped access policy."""

from inbox_relay.accounts import (
    AccessGrant,
    AccessPolicy,
    Account,
    AccountService,
    AccountStore,
    AccountSummary,
    CredentialProvisioner,
    DelegatedCaller,
    SessionIdentity,
    SqlAccountStore,
    VisibilityAdministrator,
    VisibilityTier,
)
from inbox_relay.config import Settings
from inbox_relay.email import Email, EmailSummary, GmailConnector, MailboxConnector

__version__ = "0.1.0"

__all__ = [
    "AccessGrant",
    "AccessPolicy",
    "Account",
    "AccountService",
    "AccountStore",
    "AccountSummary",
    "CredentialProvisioner",
    "DelegatedCaller",
    "Email",
    "EmailSummary",
    "GmailConnector",
    "MailboxConnector",
    "SessionIdentity",
    "Settings",
    "SqlAccountStore",
    "VisibilityAdministrator",
    "VisibilityTier",
]
