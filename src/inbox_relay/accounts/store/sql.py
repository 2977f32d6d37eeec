"""SQLAlchemy account store."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import Boolean, DateTime, Engine, String, Text, create_engine, or_, select, text, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import (
    DisconnectionError,
    InterfaceError,
    OperationalError,
    SQLAlchemyError,
)
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker

from inbox_relay.accounts.models import (
    Account,
    AccountFilter,
    AccountSummary,
    VisibilityTier,
    normalize_email,
)
from inbox_relay.accounts.store.base import AccountStore
from inbox_relay.exceptions import (
    ConfigError,
    MissingCredentialError,
    StoreError,
    StoreUnavailableError,
)

logger = logging.getLogger(__name__)

# Errors that mean the database could not be reached, as opposed to a bad query
_UNAVAILABLE_ERRORS = (OperationalError, InterfaceError, DisconnectionError, PoolTimeoutError)

_UPSERT_DIALECTS: dict[str, Any] = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@contextmanager
def _translate_errors(operation: str) -> Iterator[None]:
    """Translate SQLAlchemy errors into store errors."""
    try:
        yield
    except _UNAVAILABLE_ERRORS as e:
        logger.warning("Account store unreachable (operation=%s): %s", operation, e)
        raise StoreUnavailableError(f"Account store unavailable during {operation}") from e
    except SQLAlchemyError as e:
        logger.error("Account store error (operation=%s): %s", operation, e)
        raise StoreError(f"Account store failed during {operation}") from e


class Base(DeclarativeBase):
    pass


class AccountRecord(Base):
    """Row in the ``accounts`` table."""

    __tablename__ = "accounts"

    id: Mapped[int] = mapped_column(primary_key=True)
    email: Mapped[str] = mapped_column(String(320), unique=True, index=True)
    refresh_token: Mapped[str] = mapped_column(Text, nullable=False)
    is_premium: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)
    last_accessed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))

    def to_account(self) -> Account:
        return Account(
            email=self.email,
            refresh_token=self.refresh_token,
            tier=VisibilityTier.PREMIUM if self.is_premium else VisibilityTier.PUBLIC,
            created_at=self.created_at,
            last_accessed_at=self.last_accessed_at,
        )

    def to_summary(self) -> AccountSummary:
        return AccountSummary(
            email=self.email,
            tier=VisibilityTier.PREMIUM if self.is_premium else VisibilityTier.PUBLIC,
            created_at=self.created_at,
            last_accessed_at=self.last_accessed_at,
        )


class SqlAccountStore(AccountStore):
    """Account store backed by a relational database through SQLAlchemy.

    Upserts use the dialect's ``INSERT ... ON CONFLICT`` so that concurrent
    provisioning of the same email is serialized by the database itself.
    SQLite and PostgreSQL are supported.
    """

    def __init__(self, engine: Engine) -> None:
        """Initialize the store.

        Args:
            engine: SQLAlchemy engine to run statements on.

        Raises:
            ConfigError: If the engine's dialect has no atomic upsert support here.
        """
        dialect = engine.dialect.name
        if dialect not in _UPSERT_DIALECTS:
            raise ConfigError(f"Unsupported database dialect: {dialect}")
        self._engine = engine
        self._insert = _UPSERT_DIALECTS[dialect]
        self._sessions = sessionmaker(engine, expire_on_commit=False)

    @classmethod
    def from_url(cls, url: str, *, timeout: float = 5.0, **engine_kwargs: Any) -> "SqlAccountStore":
        """Create a store from a database URL.

        Args:
            url: SQLAlchemy database URL (e.g. "sqlite:///inbox-relay.db").
            timeout: Seconds to wait for a pooled connection.
            **engine_kwargs: Extra arguments for create_engine().
        """
        engine_kwargs.setdefault("pool_pre_ping", True)
        if not url.startswith("sqlite"):
            engine_kwargs.setdefault("pool_timeout", timeout)
        return cls(create_engine(url, **engine_kwargs))

    def create_schema(self) -> None:
        """Create the accounts table if it does not exist."""
        with _translate_errors("create schema"):
            Base.metadata.create_all(self._engine)

    def dispose(self) -> None:
        """Release pooled connections."""
        self._engine.dispose()

    def ping(self) -> None:
        with _translate_errors("ping"), self._engine.connect() as conn:
            conn.execute(text("SELECT 1"))

    def _get_record(self, session: Session, email: str) -> AccountRecord | None:
        return session.scalars(select(AccountRecord).where(AccountRecord.email == email)).first()

    def find_by_email(self, email: str) -> Account | None:
        email = normalize_email(email)
        with _translate_errors("find account"), self._sessions() as session:
            record = self._get_record(session, email)
            return record.to_account() if record else None

    def upsert_by_email(self, email: str, refresh_token: str | None = None) -> Account:
        email = normalize_email(email)
        now = _utcnow()

        with _translate_errors("upsert account"), self._sessions.begin() as session:
            if refresh_token:
                stmt = self._insert(AccountRecord.__table__).values(
                    email=email,
                    refresh_token=refresh_token,
                    is_premium=False,
                    created_at=now,
                    last_accessed_at=now,
                )
                stmt = stmt.on_conflict_do_update(
                    index_elements=["email"],
                    set_={
                        "refresh_token": stmt.excluded.refresh_token,
                        "last_accessed_at": stmt.excluded.last_accessed_at,
                    },
                )
                session.execute(stmt)
            else:
                # The provider only omits the token when a valid one was already
                # issued, so keep whatever is stored
                result = session.execute(
                    update(AccountRecord)
                    .where(AccountRecord.email == email)
                    .values(last_accessed_at=now)
                )
                if result.rowcount == 0:
                    raise MissingCredentialError(email)

            record = self._get_record(session, email)
            if record is None:
                raise StoreError(f"Account missing after upsert: {email}")
            return record.to_account()

    def update_last_accessed(self, email: str) -> None:
        email = normalize_email(email)
        with _translate_errors("update last accessed"), self._sessions.begin() as session:
            session.execute(
                update(AccountRecord)
                .where(AccountRecord.email == email)
                .values(last_accessed_at=_utcnow())
            )

    def set_visibility_tier(self, email: str, tier: VisibilityTier) -> Account | None:
        email = normalize_email(email)
        with _translate_errors("set visibility tier"), self._sessions.begin() as session:
            result = session.execute(
                update(AccountRecord)
                .where(AccountRecord.email == email)
                .values(is_premium=tier is VisibilityTier.PREMIUM)
            )
            if result.rowcount == 0:
                return None
            record = self._get_record(session, email)
            return record.to_account() if record else None

    def list_all(self, account_filter: AccountFilter | None = None) -> list[AccountSummary]:
        account_filter = account_filter or AccountFilter()
        stmt = select(AccountRecord)

        if account_filter.tiers is not None:
            premium_values = [t is VisibilityTier.PREMIUM for t in account_filter.tiers]
            condition = AccountRecord.is_premium.in_(premium_values)
            if account_filter.include_email:
                condition = or_(condition, AccountRecord.email == account_filter.include_email)
            stmt = stmt.where(condition)

        if account_filter.newest_first:
            stmt = stmt.order_by(AccountRecord.created_at.desc())
        else:
            stmt = stmt.order_by(AccountRecord.email.asc())

        with _translate_errors("list accounts"), self._sessions() as session:
            return [record.to_summary() for record in session.scalars(stmt)]

