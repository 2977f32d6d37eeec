"""FastAPI application factory."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.concurrency import run_in_threadpool
from pydantic import SecretStr
from starlette.middleware.sessions import SessionMiddleware

from inbox_relay import __version__
from inbox_relay.accounts.service import AccountService
from inbox_relay.accounts.store.base import AccountStore
from inbox_relay.accounts.store.sql import SqlAccountStore
from inbox_relay.config import ConfigError, Settings, get_settings_eager
from inbox_relay.email.connectors.base import MailboxConnector
from inbox_relay.email.connectors.gmail import GmailConnector
from inbox_relay.exceptions import StoreError
from inbox_relay.oauth import GoogleAuthorizer
from inbox_relay.web.errors import register_error_handlers
from inbox_relay.web.routes import admin, auth, health, mail

logger = structlog.get_logger()


def build_account_service(settings: Settings, store: AccountStore | None = None) -> AccountService:
    """Create an AccountService wired to Gmail and the configured database.

    Args:
        settings: Application settings.
        store: Account store to use instead of one built from database_url.
    """
    if store is None:
        store = SqlAccountStore.from_url(settings.database_url, timeout=settings.store_timeout)

    def connector_factory(refresh_token: SecretStr) -> MailboxConnector:
        return GmailConnector(settings.google, refresh_token, timeout=settings.remote_timeout)

    return AccountService(store, connector_factory, inbox_limit=settings.inbox_limit)


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create the schema on startup and release the store on shutdown."""
    store = app.state.account_service.store
    try:
        await run_in_threadpool(store.create_schema)
        logger.info("Account store ready")
    except StoreError as e:
        # Serve anyway: policy checks answer 503 until the store comes back
        logger.warning("Account store unavailable at startup", error=str(e))

    logger.info("inbox-relay started", version=__version__)
    try:
        yield
    finally:
        await run_in_threadpool(store.dispose)
        logger.info("inbox-relay stopped")


def create_app(
    settings: Settings | None = None,
    service: AccountService | None = None,
    authorizer: GoogleAuthorizer | None = None,
) -> FastAPI:
    """Build the application.

    Args:
        settings: Application settings (loaded and validated when None).
        service: Account service (built from settings when None).
        authorizer: OAuth authorizer (built from settings when None).

    Raises:
        ConfigError: If settings are invalid or no session secret is set.
    """
    settings = settings or get_settings_eager()
    if not settings.session_secret.get_secret_value():
        raise ConfigError("No session secret configured. Set INBOX_RELAY_SESSION_SECRET.")

    app = FastAPI(
        title="inbox-relay",
        description="Shared access to delegated Gmail accounts",
        version=__version__,
        lifespan=_lifespan,
    )
    app.state.settings = settings
    app.state.account_service = service or build_account_service(settings)
    app.state.authorizer = authorizer or GoogleAuthorizer(settings.google)

    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret.get_secret_value(),
        max_age=settings.session_max_age,
        same_site="lax",
    )
    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    register_error_handlers(app)

    app.include_router(health.router, tags=["health"])
    app.include_router(auth.router, tags=["auth"])
    app.include_router(mail.router, tags=["mail"])
    app.include_router(admin.router, tags=["admin"])

    return app
