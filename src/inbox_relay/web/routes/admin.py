"""Administrative endpoints."""

import hmac
import logging
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from inbox_relay.accounts.models import SessionIdentity, VisibilityTier
from inbox_relay.accounts.service import AccountService
from inbox_relay.config import Settings
from inbox_relay.exceptions import StoreUnavailableError
from inbox_relay.web.deps import get_account_service, get_session_identity, get_settings
from inbox_relay.web.errors import STORE_UNAVAILABLE_MESSAGE

logger = logging.getLogger(__name__)

router = APIRouter()


class AdminLogin(BaseModel):
    password: str


@router.post("/admin/login")
def admin_login(
    body: AdminLogin,
    request: Request,
    settings: Settings = Depends(get_settings),
) -> Any:
    """Grant admin rights to the session when the password matches."""
    expected = settings.admin_password.get_secret_value() if settings.admin_password else ""
    if not expected or not hmac.compare_digest(body.password.encode(), expected.encode()):
        logger.info("Admin login failed")
        return JSONResponse(status_code=401, content={"error": "Invalid admin password"})

    request.session["is_admin"] = True
    logger.info("Admin login succeeded")
    return {"success": True, "message": "Admin login successful"}


@router.get("/accounts")
def list_accounts(
    service: AccountService = Depends(get_account_service),
    session: SessionIdentity = Depends(get_session_identity),
) -> Any:
    """Every stored account, newest first."""
    try:
        accounts = service.list_all(session)
    except StoreUnavailableError:
        return JSONResponse(
            status_code=503,
            content={"error": STORE_UNAVAILABLE_MESSAGE, "accounts": []},
        )
    return {"accounts": [a.model_dump(mode="json") for a in accounts]}


def _set_tier(
    service: AccountService,
    session: SessionIdentity,
    email: str,
    tier: VisibilityTier,
    verb: str,
) -> dict[str, Any]:
    account = service.set_tier(email, tier, session)
    return {
        "success": True,
        "message": f"Account {account.email} {verb}",
        "account": {
            "email": account.email,
            "tier": account.tier.value,
            "isPremium": account.is_premium,
        },
    }


@router.post("/admin/lock/{email}")
def lock_account(
    email: str,
    service: AccountService = Depends(get_account_service),
    session: SessionIdentity = Depends(get_session_identity),
) -> dict[str, Any]:
    """Make an account premium."""
    return _set_tier(service, session, email, VisibilityTier.PREMIUM, "locked")


@router.post("/admin/unlock/{email}")
def unlock_account(
    email: str,
    service: AccountService = Depends(get_account_service),
    session: SessionIdentity = Depends(get_session_identity),
) -> dict[str, Any]:
    """Make an account public."""
    return _set_tier(service, session, email, VisibilityTier.PUBLIC, "unlocked")
