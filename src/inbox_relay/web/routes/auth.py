"""Provider authorization and session endpoints."""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse, RedirectResponse, Response

from inbox_relay.accounts.service import AccountService
from inbox_relay.config import Settings
from inbox_relay.exceptions import RemoteError
from inbox_relay.oauth import GoogleAuthorizer
from inbox_relay.web.deps import get_account_service, get_authorizer, get_settings

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/auth/google")
def start_authorization(
    request: Request,
    authorizer: GoogleAuthorizer = Depends(get_authorizer),
) -> Response:
    """Redirect to the Google consent page."""
    auth_request = authorizer.authorization_url()
    request.session["oauth_state"] = auth_request.state
    if auth_request.code_verifier:
        request.session["oauth_code_verifier"] = auth_request.code_verifier
    else:
        request.session.pop("oauth_code_verifier", None)
    return RedirectResponse(auth_request.url, status_code=302)


@router.get("/auth/google/callback")
def finish_authorization(
    request: Request,
    code: str | None = None,
    state: str | None = None,
    authorizer: GoogleAuthorizer = Depends(get_authorizer),
    service: AccountService = Depends(get_account_service),
    settings: Settings = Depends(get_settings),
) -> Response:
    """Store the delegated credential and bind the account to the session."""
    if not code:
        return PlainTextResponse("Authorization code not provided", status_code=400)

    expected_state = request.session.pop("oauth_state", None)
    code_verifier = request.session.pop("oauth_code_verifier", None)
    if not expected_state or state != expected_state:
        logger.warning("OAuth callback with mismatched state")
        return PlainTextResponse("Invalid authorization state", status_code=400)

    try:
        result = authorizer.exchange(code, state=state, code_verifier=code_verifier)
    except RemoteError:
        return PlainTextResponse("Authentication failed", status_code=500)

    provisioned = service.provision(result.email, result.refresh_token)
    request.session["user_email"] = provisioned.email
    logger.info("User authenticated (email=%s, status=%s)", provisioned.email, provisioned.status.value)

    target = settings.post_login_redirect
    if provisioned.degraded:
        target += ("&" if "?" in target else "?") + "degraded=1"
    return RedirectResponse(target, status_code=302)


@router.get("/logout")
def logout(request: Request) -> Response:
    """Clear the session."""
    request.session.clear()
    return RedirectResponse("/", status_code=302)
