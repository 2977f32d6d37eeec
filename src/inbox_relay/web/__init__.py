"""HTTP surface of inbox-relay."""

from inbox_relay.web.app import build_account_service, create_app

__all__ = ["build_account_service", "create_app"]
