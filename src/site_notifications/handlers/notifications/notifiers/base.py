"""Base notifier class for email delivery."""

from abc import abstractmethod
from dataclasses import dataclass

from site_notifications.handlers.notifications.notifiers.model import EmailMessage, NotifierResult


@dataclass
class Notifier:
    """Abstract base class for email delivery implementations.

    `notify` never raises: provider failures are reported through an
    unsuccessful `NotifierResult` carrying the provider's error message.

    Example:
        ```python
        @dataclass
        class MyNotifier(Notifier):
            def notify(self, message: EmailMessage) -> NotifierResult:
                # Implement delivery logic
                return NotifierResult(success=True, response="{}", message_id="abc")
        ```
    """

    @abstractmethod
    def notify(self, message: EmailMessage) -> NotifierResult:
        """Deliver an email.

        Args:
            message (EmailMessage): The email to deliver.

        Returns:
            Result indicating success or failure.
        """
        raise NotImplementedError("Please implement `notify` method")  # pragma: no cover

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}"
