"""Abstract base class for mailbox connectors."""

from abc import ABC, abstractmethod
from types import TracebackType

from inbox_relay.email.models import Email, EmailSummary


class MailboxConnector(ABC):
    """Abstract base class for delegated access to one provider mailbox.

    A connector is bound to a single account's credential and is meant to be
    used for a single call, then discarded.
    """

    @abstractmethod
    def connect(self) -> None:
        """Prepare an authorized client for the provider."""
        ...

    @abstractmethod
    def disconnect(self) -> None:
        """Drop the authorized client and its credential."""
        ...

    @abstractmethod
    def list_recent(self, limit: int) -> list[EmailSummary]:
        """List the most recent inbox messages.

        Args:
            limit: Maximum number of messages to return.

        Returns:
            List of EmailSummary objects, newest first.

        Raises:
            RemoteError: If the provider call fails.
        """
        ...

    @abstractmethod
    def get_message(self, message_id: str) -> Email:
        """Fetch one message by its provider ID.

        Raises:
            RemoteError: If the provider call fails, including unknown IDs.
        """
        ...

    def __enter__(self) -> "MailboxConnector":
        """Context manager entry - prepare the client."""
        self.connect()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Context manager exit - drop the client."""
        self.disconnect()
