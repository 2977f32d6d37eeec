"""Mailbox provider access."""

from inbox_relay.email.connectors import GmailConnector, MailboxConnector
from inbox_relay.email.models import Attachment, Email, EmailAddress, EmailSummary

__all__ = [
    "Attachment",
    "Email",
    "EmailAddress",
    "EmailSummary",
    "GmailConnector",
    "MailboxConnector",
]
