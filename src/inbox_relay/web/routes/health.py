"""Service banner and health checks."""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from inbox_relay import __version__
from inbox_relay.accounts.service import AccountService
from inbox_relay.exceptions import StoreError
from inbox_relay.web.deps import get_account_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/")
def root() -> dict[str, str]:
    return {"message": "inbox-relay", "version": __version__}


@router.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/health/db", response_model=None)
def health_db(service: AccountService = Depends(get_account_service)) -> dict[str, str] | JSONResponse:
    """Check that the account store is reachable. Returns 503 on failure."""
    try:
        service.store.ping()
    except StoreError as exc:
        logger.error("Database health check failed: %s", exc)
        return JSONResponse(
            status_code=503,
            content={"status": "error", "database": "unreachable"},
        )
    return {"status": "ok", "database": "reachable"}
