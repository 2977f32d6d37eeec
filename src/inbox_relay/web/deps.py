"""FastAPI dependencies shared by the routers."""

from fastapi import Request

from inbox_relay.accounts.models import SessionIdentity
from inbox_relay.accounts.service import AccountService
from inbox_relay.config import Settings
from inbox_relay.oauth import GoogleAuthorizer


def get_account_service(request: Request) -> AccountService:
    return request.app.state.account_service


def get_authorizer(request: Request) -> GoogleAuthorizer:
    return request.app.state.authorizer


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_session_identity(request: Request) -> SessionIdentity:
    """Identity carried by the signed session cookie (anonymous when absent)."""
    return SessionIdentity.from_session(request.session)
