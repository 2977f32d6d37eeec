"""Custom exceptions for inbox-relay."""

from enum import Enum


class InboxRelayError(Exception):
    """Base exception for inbox-relay."""


class ConfigError(InboxRelayError):
    """Raised when there is a configuration error."""


class AccountNotFoundError(InboxRelayError):
    """Raised when a requested account is not found."""

    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__(f"Account not found: {email}")


class StoreError(InboxRelayError):
    """Raised when the account store fails an operation."""


class StoreUnavailableError(StoreError):
    """Raised when the account store cannot be reached."""

    def __init__(self, message: str = "Account store unavailable") -> None:
        super().__init__(message)


class MissingCredentialError(InboxRelayError):
    """Raised when an account would be created without a delegated credential."""

    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__(
            f"No refresh token was issued for '{email}' and no stored credential exists; "
            "the account must re-consent"
        )


class DenialReason(str, Enum):
    """Why the access policy refused a request."""

    NOT_FOUND = "not_found"
    SERVICE_UNAVAILABLE = "service_unavailable"
    PREMIUM_ACCESS_DENIED = "premium_access_denied"


class AccessDeniedError(InboxRelayError):
    """Raised when the access policy refuses a request for an account."""

    def __init__(self, email: str, reason: DenialReason) -> None:
        self.email = email
        self.reason = reason
        super().__init__(f"Access to '{email}' denied: {reason.value}")


class AdminRequiredError(InboxRelayError):
    """Raised when an administrative operation is attempted without admin rights."""

    def __init__(self) -> None:
        super().__init__("Access denied. Admin privileges required.")


class RemoteError(InboxRelayError):
    """Raised when a delegated call to the mailbox provider fails."""

    def __init__(self, message: str, status: int | None = None) -> None:
        self.status = status
        super().__init__(message)
