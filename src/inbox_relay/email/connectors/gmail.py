"""Gmail API connector acting on behalf of one delegated account."""

from __future__ import annotations

import base64
import binascii
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from email.utils import parseaddr, parsedate_to_datetime
from typing import Any

import httplib2
from google.auth.exceptions import GoogleAuthError, RefreshError
from google.oauth2.credentials import Credentials
from google_auth_httplib2 import AuthorizedHttp
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from pydantic import SecretStr

from inbox_relay.email.connectors.base import MailboxConnector
from inbox_relay.email.connectors.config import GoogleClientConfig
from inbox_relay.email.models import Attachment, Email, EmailAddress, EmailSummary
from inbox_relay.exceptions import RemoteError

logger = logging.getLogger(__name__)

GMAIL_SCOPES = ["https://www.googleapis.com/auth/gmail.readonly"]

_DEFAULT_SENDER = EmailAddress(address="unknown@unknown")


def _parse_address(raw: str) -> EmailAddress:
    """Parse an RFC 2822 address string into an EmailAddress."""
    name, addr = parseaddr(raw)
    if not addr:
        return _DEFAULT_SENDER
    return EmailAddress(name=name or None, address=addr)


def _parse_address_list(raw: str) -> list[EmailAddress]:
    """Parse a comma-separated address header into a list of EmailAddress."""
    if not raw:
        return []
    results = []
    for part in raw.split(","):
        part = part.strip()
        if part:
            parsed = _parse_address(part)
            if parsed is not _DEFAULT_SENDER:
                results.append(parsed)
    return results


def _get_header(headers: list[dict[str, str]], name: str) -> str:
    """Get a header value by name (case-insensitive)."""
    lower_name = name.lower()
    for h in headers:
        if h["name"].lower() == lower_name:
            return h["value"]
    return ""


def _parse_date(date_str: str) -> datetime:
    """Parse an RFC 2822 date string, falling back to now."""
    if not date_str:
        return datetime.now(timezone.utc)
    try:
        return parsedate_to_datetime(date_str)
    except (TypeError, ValueError):
        return datetime.now(timezone.utc)


def _extract_body_parts(
    payload: dict[str, object],
) -> tuple[str | None, str | None, list[Attachment]]:
    """Recursively extract text/plain, text/html bodies and attachment metadata."""
    plain: str | None = None
    html: str | None = None
    attachments: list[Attachment] = []

    mime_type = str(payload.get("mimeType", ""))
    filename = str(payload.get("filename", ""))
    body = payload.get("body")
    body_dict = body if isinstance(body, dict) else {}
    parts = payload.get("parts")
    parts_list: list[dict[str, object]] = parts if isinstance(parts, list) else []

    if filename:
        size = body_dict.get("size")
        attachments.append(
            Attachment(
                filename=filename,
                content_type=mime_type or "application/octet-stream",
                size=int(size) if isinstance(size, int) else None,
            )
        )
    elif parts_list:
        for part in parts_list:
            p, h, atts = _extract_body_parts(part)
            if p and not plain:
                plain = p
            if h and not html:
                html = h
            attachments.extend(atts)
    else:
        data = body_dict.get("data")
        if isinstance(data, str) and data:
            try:
                decoded = base64.urlsafe_b64decode(data).decode("utf-8", errors="replace")
            except binascii.Error:
                logger.warning("Skipping body part with malformed base64 data")
                return plain, html, attachments
            if mime_type == "text/plain" and not plain:
                plain = decoded
            elif mime_type == "text/html" and not html:
                html = decoded

    return plain, html, attachments


@contextmanager
def _remote_call(action: str) -> Iterator[None]:
    """Translate provider and transport errors into RemoteError."""
    try:
        yield
    except HttpError as e:
        status = e.resp.status if e.resp is not None else None
        logger.warning("Gmail request failed (action=%s, status=%s)", action, status)
        raise RemoteError(f"Gmail request failed while trying to {action}", status=status) from e
    except RefreshError as e:
        logger.warning("Delegated credential rejected (action=%s): %s", action, e)
        raise RemoteError("Delegated credential was rejected (expired or revoked)") from e
    except GoogleAuthError as e:
        logger.warning("Gmail authorization error (action=%s): %s", action, e)
        raise RemoteError(f"Gmail authorization failed while trying to {action}") from e
    except (httplib2.HttpLib2Error, OSError) as e:
        logger.warning("Could not reach Gmail (action=%s): %s", action, e)
        raise RemoteError(f"Could not reach Gmail while trying to {action}") from e


class GmailConnector(MailboxConnector):
    """Reads a Gmail inbox with a stored refresh token.

    Each instance builds its own Credentials object from the account's
    refresh token, so no access token is shared between accounts or requests.
    """

    def __init__(
        self,
        client: GoogleClientConfig,
        refresh_token: SecretStr,
        *,
        timeout: float = 30.0,
    ) -> None:
        """Initialize the connector.

        Args:
            client: OAuth client the refresh token was issued to.
            refresh_token: The account's delegated credential.
            timeout: Socket timeout in seconds for provider requests.
        """
        self._client = client
        self._refresh_token = refresh_token
        self._timeout = timeout
        self._service: Any = None

    def _build_credentials(self) -> Credentials:
        return Credentials(  # type: ignore[no-untyped-call]
            token=None,
            refresh_token=self._refresh_token.get_secret_value(),
            client_id=self._client.client_id,
            client_secret=self._client.client_secret.get_secret_value(),
            token_uri=self._client.token_uri,
            scopes=GMAIL_SCOPES,
        )

    def connect(self) -> None:
        """Build an authorized Gmail service for this account."""
        http = AuthorizedHttp(self._build_credentials(), http=httplib2.Http(timeout=self._timeout))
        with _remote_call("connect"):
            self._service = build("gmail", "v1", http=http, cache_discovery=False)

    def disconnect(self) -> None:
        """Drop the Gmail service."""
        self._service = None

    def _get_service(self) -> Any:
        if not self._service:
            raise RuntimeError("Not connected. Call connect() first.")
        return self._service

    def list_recent(self, limit: int) -> list[EmailSummary]:
        """List the newest messages carrying the INBOX label."""
        service = self._get_service()

        with _remote_call("list messages"):
            response = (
                service.users()
                .messages()
                .list(userId="me", labelIds=["INBOX"], maxResults=limit)
                .execute()
            )
            messages: list[dict[str, str]] = response.get("messages", [])

            summaries = []
            for msg_ref in messages[:limit]:
                msg = (
                    service.users()
                    .messages()
                    .get(
                        userId="me",
                        id=msg_ref["id"],
                        format="metadata",
                        metadataHeaders=["Subject", "From", "Date"],
                    )
                    .execute()
                )
                headers: list[dict[str, str]] = msg.get("payload", {}).get("headers", [])
                label_ids: list[str] = msg.get("labelIds", [])

                summaries.append(
                    EmailSummary(
                        id=msg["id"],
                        subject=_get_header(headers, "Subject"),
                        sender=_parse_address(_get_header(headers, "From")),
                        date=_parse_date(_get_header(headers, "Date")),
                        snippet=msg.get("snippet", ""),
                        # Gmail uses the UNREAD label instead of a \Seen flag
                        is_seen="UNREAD" not in label_ids,
                    )
                )

        return summaries

    def get_message(self, message_id: str) -> Email:
        """Fetch full message content by Gmail message ID."""
        service = self._get_service()

        with _remote_call("fetch message"):
            msg = service.users().messages().get(userId="me", id=message_id, format="full").execute()

        payload: dict[str, object] = msg.get("payload", {})
        headers: list[dict[str, str]] = payload.get("headers", [])  # type: ignore[assignment]
        label_ids: list[str] = msg.get("labelIds", [])

        plain, html, attachments = _extract_body_parts(payload)

        return Email(
            id=msg["id"],
            subject=_get_header(headers, "Subject"),
            sender=_parse_address(_get_header(headers, "From")),
            date=_parse_date(_get_header(headers, "Date")),
            snippet=msg.get("snippet", ""),
            is_seen="UNREAD" not in label_ids,
            to=_parse_address_list(_get_header(headers, "To")),
            cc=_parse_address_list(_get_header(headers, "Cc")),
            body_plain=plain,
            body_html=html,
            attachments=attachments,
            message_id=_get_header(headers, "Message-ID") or None,
        )
