"""Persistent account stores."""

from inbox_relay.accounts.store.base import AccountStore
from inbox_relay.accounts.store.sql import SqlAccountStore

__all__ = ["AccountStore", "SqlAccountStore"]
