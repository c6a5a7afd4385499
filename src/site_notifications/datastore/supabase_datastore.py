"""Supabase implementation of the datastore."""

from dataclasses import dataclass, field
from functools import cached_property, lru_cache
from typing import List, Optional

from aibs_informatics_core.utils.logging import get_logger
from supabase import Client, ClientOptions, create_client

from site_notifications.common.settings import NotificationSettings, get_settings
from site_notifications.datastore.base import Datastore, DatastoreError
from site_notifications.datastore.model import (
    CONTACT_MESSAGES_TABLE,
    EMAIL_SUBSCRIPTIONS_TABLE,
    NEWSLETTER_SENDS_TABLE,
    PROFILES_TABLE,
    AuthenticatedUser,
    ContactMessage,
    ContactReplyUpdate,
    ContactStatus,
    EmailSubscription,
    NewsletterSendRecord,
)

logger = get_logger(__name__)


@dataclass
class SupabaseDatastore(Datastore):
    """Datastore backed by Supabase tables and Supabase auth.

    The client is created on first use and reused for the lifetime of the
    instance. Sessions are never persisted since every call is made with either
    the service credential or a forwarded caller credential.

    Example:
        ```python
        datastore = SupabaseDatastore(url="https://xyz.supabase.co", key="service-role-key")
        message = datastore.get_contact_message("42")
        ```
    """

    url: str
    key: str
    authorization: Optional[str] = field(default=None, repr=False)

    @classmethod
    def from_settings(cls, settings: NotificationSettings) -> "SupabaseDatastore":
        return cls(url=settings.supabase_url, key=settings.supabase_service_role_key)

    @cached_property
    def client(self) -> Client:
        headers = {"Authorization": self.authorization} if self.authorization else {}
        options = ClientOptions(headers=headers, auto_refresh_token=False, persist_session=False)
        return create_client(self.url, self.key, options=options)

    def with_authorization(self, authorization: str) -> "SupabaseDatastore":
        return SupabaseDatastore(url=self.url, key=self.key, authorization=authorization)

    def insert_contact_message(
        self, name: str, email: str, subject: str, message: str
    ) -> ContactMessage:
        row = {
            "name": name,
            "email": email,
            "subject": subject,
            "message": message,
            "status": ContactStatus.PENDING.value,
        }
        try:
            response = self.client.table(CONTACT_MESSAGES_TABLE).insert(row).execute()
        except Exception as e:
            raise DatastoreError(f"Failed to store contact message: {e}") from e
        if not response.data:
            raise DatastoreError("Failed to store contact message: no row returned")
        return ContactMessage.from_row(response.data[0])

    def get_contact_message(self, message_id: str) -> Optional[ContactMessage]:
        try:
            response = (
                self.client.table(CONTACT_MESSAGES_TABLE)
                .select("*")
                .eq("id", message_id)
                .maybe_single()
                .execute()
            )
        except Exception as e:
            raise DatastoreError(f"Failed to fetch contact message: {e}") from e
        # maybe_single yields no response at all on some client versions
        if response is None or not response.data:
            return None
        return ContactMessage.from_row(response.data)

    def update_contact_message(self, message_id: str, update: ContactReplyUpdate) -> None:
        try:
            self.client.table(CONTACT_MESSAGES_TABLE).update(update.to_dict()).eq(
                "id", message_id
            ).execute()
        except Exception as e:
            raise DatastoreError(f"Failed to update contact message: {e}") from e

    def get_authenticated_user(self, access_token: str) -> Optional[AuthenticatedUser]:
        try:
            response = self.client.auth.get_user(access_token)
        except Exception as e:
            raise DatastoreError(f"Failed to verify access token: {e}") from e
        if response is None or response.user is None:
            return None
        return AuthenticatedUser(id=str(response.user.id), email=response.user.email)

    def get_profile_role(self, user_id: str) -> Optional[str]:
        try:
            response = (
                self.client.table(PROFILES_TABLE)
                .select("role")
                .eq("id", user_id)
                .maybe_single()
                .execute()
            )
        except Exception as e:
            raise DatastoreError(f"Failed to fetch profile: {e}") from e
        if response is None or not response.data:
            return None
        return response.data.get("role")

    def list_active_subscriptions(self) -> List[EmailSubscription]:
        try:
            response = (
                self.client.table(EMAIL_SUBSCRIPTIONS_TABLE)
                .select("email, is_active")
                .eq("is_active", True)
                .execute()
            )
        except Exception as e:
            raise DatastoreError(f"Failed to fetch email subscriptions: {e}") from e
        return [EmailSubscription.from_row(row) for row in response.data or []]

    def list_profile_emails(self) -> List[str]:
        try:
            response = (
                self.client.table(PROFILES_TABLE)
                .select("email")
                .not_.is_("email", "null")
                .execute()
            )
        except Exception as e:
            raise DatastoreError(f"Failed to fetch profile emails: {e}") from e
        return [row["email"] for row in response.data or [] if row.get("email")]

    def insert_newsletter_send(self, record: NewsletterSendRecord) -> None:
        try:
            self.client.table(NEWSLETTER_SENDS_TABLE).insert(record.to_dict()).execute()
        except Exception as e:
            raise DatastoreError(f"Failed to record newsletter send: {e}") from e
        logger.debug(f"Recorded newsletter send {record.subject!r}")


@lru_cache(maxsize=None)
def get_datastore() -> SupabaseDatastore:
    """Datastore of this process, built from the environment settings on first use."""
    return SupabaseDatastore.from_settings(get_settings())
