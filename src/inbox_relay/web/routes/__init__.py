"""HTTP routers."""

from inbox_relay.web.routes import admin, auth, health, mail

__all__ = ["admin", "auth", "health", "mail"]
