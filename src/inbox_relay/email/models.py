"""Email data models returned by mailbox connectors."""

from datetime import datetime

from pydantic import BaseModel


class EmailAddress(BaseModel):
    """Parsed email address with optional display name."""

    name: str | None = None
    address: str

    def __str__(self) -> str:
        if self.name:
            return f"{self.name} <{self.address}>"
        return self.address


class Attachment(BaseModel):
    """Email attachment metadata (content not included)."""

    filename: str
    content_type: str
    size: int | None = None


class EmailSummary(BaseModel):
    """Lightweight message representation for inbox listings."""

    id: str
    subject: str
    sender: EmailAddress
    date: datetime
    snippet: str = ""
    is_seen: bool = False


class Email(EmailSummary):
    """Full message content."""

    to: list[EmailAddress] = []
    cc: list[EmailAddress] = []
    body_plain: str | None = None
    body_html: str | None = None
    attachments: list[Attachment] = []
    message_id: str | None = None
