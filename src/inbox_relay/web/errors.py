"""Mapping of relay exceptions to HTTP responses."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from inbox_relay.exceptions import (
    AccessDeniedError,
    AccountNotFoundError,
    AdminRequiredError,
    DenialReason,
    MissingCredentialError,
    RemoteError,
    StoreError,
    StoreUnavailableError,
)

logger = logging.getLogger(__name__)

STORE_UNAVAILABLE_MESSAGE = "Database temporarily unavailable. Please try again later."

DENIAL_RESPONSES: dict[DenialReason, tuple[int, str]] = {
    DenialReason.NOT_FOUND: (404, "Account not found"),
    DenialReason.SERVICE_UNAVAILABLE: (503, STORE_UNAVAILABLE_MESSAGE),
    DenialReason.PREMIUM_ACCESS_DENIED: (403, "Access denied. This is a premium account."),
}


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def _access_denied(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, AccessDeniedError)
    status_code, message = DENIAL_RESPONSES[exc.reason]
    return _error(status_code, message)


async def _account_not_found(request: Request, exc: Exception) -> JSONResponse:
    return _error(404, "Account not found")


async def _admin_required(request: Request, exc: Exception) -> JSONResponse:
    return _error(403, str(exc))


async def _missing_credential(request: Request, exc: Exception) -> JSONResponse:
    return _error(400, "Google did not issue a refresh token. Please authorize again.")


async def _store_unavailable(request: Request, exc: Exception) -> JSONResponse:
    return _error(503, STORE_UNAVAILABLE_MESSAGE)


async def _store_error(request: Request, exc: Exception) -> JSONResponse:
    return _error(500, "Internal server error")


async def _remote_error(request: Request, exc: Exception) -> JSONResponse:
    logger.warning("Mail provider call failed (path=%s): %s", request.url.path, exc)
    return _error(500, "Failed to fetch from mail provider")


async def _unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error (path=%s)", request.url.path)
    return _error(500, "Internal server error")


def register_error_handlers(app: FastAPI) -> None:
    """Install the exception handlers on an application."""
    app.add_exception_handler(AccessDeniedError, _access_denied)
    app.add_exception_handler(AccountNotFoundError, _account_not_found)
    app.add_exception_handler(AdminRequiredError, _admin_required)
    app.add_exception_handler(MissingCredentialError, _missing_credential)
    app.add_exception_handler(StoreUnavailableError, _store_unavailable)
    app.add_exception_handler(StoreError, _store_error)
    app.add_exception_handler(RemoteError, _remote_error)
    app.add_exception_handler(Exception, _unexpected)
