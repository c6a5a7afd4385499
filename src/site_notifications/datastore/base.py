"""Base datastore interface used by the notification handlers."""

from abc import abstractmethod
from typing import List, Optional

from aibs_informatics_core.exceptions import ApplicationException

from site_notifications.datastore.model import (
    AuthenticatedUser,
    ContactMessage,
    ContactReplyUpdate,
    EmailSubscription,
    NewsletterSendRecord,
)


class DatastoreError(ApplicationException):
    """A datastore call failed. The message carries the datastore's own error message."""


class Datastore:
    """Abstract base class for the managed datastore.

    Implementations wrap a client of the datastore platform. Every operation is a
    single call, and any failure of that call is raised as a `DatastoreError`.
    Absent rows are not errors: lookups return None instead.

    Example:
        ```python
        @dataclass
        class MyDatastore(Datastore):
            def get_contact_message(self, message_id: str) -> Optional[ContactMessage]:
                ...
        ```
    """

    def with_authorization(self, authorization: str) -> "Datastore":
        """Get a datastore evaluating access control against the caller's credential.

        The `Authorization` header value is forwarded as-is. Implementations without
        an access-control model return themselves.
        """
        return self

    @abstractmethod
    def insert_contact_message(
        self, name: str, email: str, subject: str, message: str
    ) -> ContactMessage:
        """Insert a `pending` contact message and return the stored row."""
        raise NotImplementedError("Please implement `insert_contact_message`")  # pragma: no cover

    @abstractmethod
    def get_contact_message(self, message_id: str) -> Optional[ContactMessage]:
        raise NotImplementedError("Please implement `get_contact_message`")  # pragma: no cover

    @abstractmethod
    def update_contact_message(self, message_id: str, update: ContactReplyUpdate) -> None:
        raise NotImplementedError("Please implement `update_contact_message`")  # pragma: no cover

    @abstractmethod
    def get_authenticated_user(self, access_token: str) -> Optional[AuthenticatedUser]:
        """Verify an access token against the auth provider.

        Returns:
            The user the token belongs to, or None if the token is not valid.
        """
        raise NotImplementedError("Please implement `get_authenticated_user`")  # pragma: no cover

    @abstractmethod
    def get_profile_role(self, user_id: str) -> Optional[str]:
        raise NotImplementedError("Please implement `get_profile_role`")  # pragma: no cover

    @abstractmethod
    def list_active_subscriptions(self) -> List[EmailSubscription]:
        raise NotImplementedError("Please implement `list_active_subscriptions`")  # pragma: no cover

    @abstractmethod
    def list_profile_emails(self) -> List[str]:
        """Emails of all profiles with a non-null email."""
        raise NotImplementedError("Please implement `list_profile_emails`")  # pragma: no cover

    @abstractmethod
    def insert_newsletter_send(self, record: NewsletterSendRecord) -> None:
        raise NotImplementedError("Please implement `insert_newsletter_send`")  # pragma: no cover
