"""Account and session identity models."""

from collections.abc import Mapping
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator


def normalize_email(email: str) -> str:
    """Normalize an email address for lookups and comparisons.

    For example:
    - "  Foo@Bar.com " -> "foo@bar.com"
    """
    return email.strip().lower()


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class VisibilityTier(str, Enum):
    """Default visibility of an account.

    PUBLIC accounts can be read by anyone; PREMIUM accounts only by their
    owner or an administrator.
    """

    PUBLIC = "public"
    PREMIUM = "premium"


class AccountSummary(BaseModel):
    """Account listing entry without the delegated credential."""

    email: str
    tier: VisibilityTier = VisibilityTier.PUBLIC
    created_at: datetime
    last_accessed_at: datetime

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, v: str) -> str:
        return normalize_email(v)

    @field_validator("created_at", "last_accessed_at")
    @classmethod
    def _ensure_utc(cls, v: datetime) -> datetime:
        return _as_utc(v)

    @property
    def is_premium(self) -> bool:
        return self.tier is VisibilityTier.PREMIUM


class Account(AccountSummary):
    """A delegated mailbox identity known to the relay.

    Attributes:
        email: Normalized email address, unique per account.
        refresh_token: Long-lived delegated credential issued by the provider.
        tier: Visibility tier (default: PUBLIC).
        created_at: When the account was first provisioned.
        last_accessed_at: Last successful delegated call or provisioning.
    """

    refresh_token: SecretStr = Field(..., exclude=True)

    @field_validator("refresh_token")
    @classmethod
    def _require_token(cls, v: SecretStr) -> SecretStr:
        if not v.get_secret_value():
            raise ValueError("refresh_token must not be empty")
        return v

    def summary(self) -> AccountSummary:
        """Return the account without its credential."""
        return AccountSummary(
            email=self.email,
            tier=self.tier,
            created_at=self.created_at,
            last_accessed_at=self.last_accessed_at,
        )


class AccountFilter(BaseModel):
    """Filter for account listings.

    An account matches when its tier is in ``tiers`` (any tier when None) or
    its email equals ``include_email``.
    """

    tiers: frozenset[VisibilityTier] | None = None
    include_email: str | None = None
    newest_first: bool = False

    @field_validator("include_email")
    @classmethod
    def _normalize_email(cls, v: str | None) -> str | None:
        return normalize_email(v) if v else None


class SessionIdentity(BaseModel):
    """Request-scoped identity taken from the session bag."""

    model_config = ConfigDict(frozen=True)

    user_email: str | None = None
    is_admin: bool = False

    @field_validator("user_email")
    @classmethod
    def _normalize_email(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return normalize_email(v) or None

    @classmethod
    def from_session(cls, session: Mapping[str, Any]) -> "SessionIdentity":
        """Build an identity from a session mapping, ignoring unknown keys."""
        return cls(
            user_email=session.get("user_email"),
            is_admin=session.get("is_admin") is True,
        )

    @property
    def is_anonymous(self) -> bool:
        return self.user_email is None and not self.is_admin
