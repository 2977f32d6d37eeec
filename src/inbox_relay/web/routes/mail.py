"""Mailbox read endpoints gated by the access policy."""

from typing import Any

from fastapi import APIRouter, Depends

from inbox_relay.accounts.models import SessionIdentity
from inbox_relay.accounts.service import AccountService, InboxListing
from inbox_relay.email.models import Email
from inbox_relay.web.deps import get_account_service, get_session_identity

router = APIRouter()


@router.get("/inbox/{email}", response_model=InboxListing)
def get_inbox(
    email: str,
    service: AccountService = Depends(get_account_service),
    session: SessionIdentity = Depends(get_session_identity),
) -> InboxListing:
    """Recent inbox messages of an account the session may read."""
    return service.list_inbox(email, session)


@router.get("/email/{email}/{message_id}", response_model=Email)
def get_email(
    email: str,
    message_id: str,
    service: AccountService = Depends(get_account_service),
    session: SessionIdentity = Depends(get_session_identity),
) -> Email:
    """Full content of one message of an account the session may read."""
    return service.get_message(email, message_id, session)


@router.get("/available-accounts")
def available_accounts(
    service: AccountService = Depends(get_account_service),
    session: SessionIdentity = Depends(get_session_identity),
) -> dict[str, Any]:
    """Accounts the session may read.

    Answers with an empty list rather than an error when the store is down.
    """
    listing = service.list_available(session)
    if listing.degraded:
        return {"accounts": [], "message": "Database temporarily unavailable"}
    return {"accounts": [a.model_dump(mode="json") for a in listing.accounts]}
