"""Tests for email models."""

from datetime import datetime, timezone

from inbox_relay.email.models import Email, EmailAddress, EmailSummary


class TestEmailAddress:
    def test_str_with_name(self) -> None:
        assert str(EmailAddress(name="Alice", address="alice@example.com")) == "Alice <alice@example.com>"

    def test_str_without_name(self) -> None:
        assert str(EmailAddress(address="alice@example.com")) == "alice@example.com"


class TestEmail:
    def test_defaults(self) -> None:
        email = Email(
            id="m1",
            subject="Hello",
            sender=EmailAddress(address="alice@example.com"),
            date=datetime(2026, 3, 1, tzinfo=timezone.utc),
        )

        assert email.to == []
        assert email.attachments == []
        assert email.body_plain is None
        assert email.is_seen is False
        assert isinstance(email, EmailSummary)
