"""Mailbox connectors for delegated provider access."""

from inbox_relay.email.connectors.base import MailboxConnector
from inbox_relay.email.connectors.config import GoogleClientConfig
from inbox_relay.email.connectors.gmail import GmailConnector

__all__ = ["GmailConnector", "GoogleClientConfig", "MailboxConnector"]
