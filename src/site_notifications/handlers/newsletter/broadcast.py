from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import ClassVar, List, Optional, Union

from site_notifications.common.api.handler import AUTHORIZATION_HEADER, ApiLambdaHandler
from site_notifications.common.api.model import ApiError, ErrorKind
from site_notifications.common.logging import error_fields
from site_notifications.common.settings import NotificationSettings, get_settings
from site_notifications.datastore.base import Datastore, DatastoreError
from site_notifications.datastore.model import NewsletterSendRecord
from site_notifications.datastore.supabase_datastore import get_datastore
from site_notifications.handlers.newsletter.model import (
    NewsletterRequest,
    NewsletterResponse,
    merge_recipients,
)
from site_notifications.handlers.newsletter.templates import render_newsletter
from site_notifications.handlers.notifications.notifiers.base import Notifier
from site_notifications.handlers.notifications.notifiers.model import EmailMessage
from site_notifications.handlers.notifications.notifiers.ses import get_notifier

NO_RECIPIENTS_MESSAGE = "No email recipients found"
RECIPIENT_SAMPLE_SIZE = 3


@dataclass
class NewsletterBroadcastHandler(ApiLambdaHandler[NewsletterRequest, NewsletterResponse]):
    """Sends a newsletter to every active subscriber and every user with an email.

    The caller's `Authorization` header is forwarded to the datastore, which
    decides what the caller may read and write. Recipients are collected from
    subscriptions and profiles, deduplicated and sent to in one batch. A record
    of the send is written afterwards on a best-effort basis.
    """

    settings: NotificationSettings = field(default_factory=get_settings)
    datastore: Datastore = field(default_factory=get_datastore)
    notifier: Notifier = field(default_factory=get_notifier)

    log_context: ClassVar[str] = "NEWSLETTER"
    cors_allow_headers: ClassVar[str] = (
        "authorization, x-client-info, apikey, content-type, x-requested-with"
    )
    cors_allow_methods: ClassVar[str] = "POST, OPTIONS, GET"
    cors_max_age: ClassVar[Optional[int]] = 86400

    def authorize(self) -> Optional[ApiError]:
        if not self.get_header(AUTHORIZATION_HEADER):
            return ApiError(ErrorKind.UNAUTHORIZED, "Authorization header is missing")
        return None

    def handle(self, request: NewsletterRequest) -> Union[NewsletterResponse, ApiError]:
        if not request.subject or not request.content:
            return ApiError(ErrorKind.VALIDATION, "Missing required fields: subject and content")

        self.log.info(
            "Validation passed",
            extra={
                "subject_length": len(request.subject),
                "content_length": len(request.content),
            },
        )

        datastore = self.datastore.with_authorization(
            self.get_header(AUTHORIZATION_HEADER) or ""
        )

        recipients = self.collect_recipients(datastore)
        if isinstance(recipients, ApiError):
            return recipients

        if not recipients:
            self.log.info("No email recipients found, returning early")
            return NewsletterResponse(recipient_count=0, message=NO_RECIPIENTS_MESSAGE)

        self.log.info("Sending newsletter", extra={"recipient_count": len(recipients)})
        result = self.notifier.notify(
            EmailMessage(
                source=self.settings.broadcast_from_email,
                recipients=recipients,
                subject=request.subject,
                html=render_newsletter(request.content, self.settings.site_name),
            )
        )
        if not result.success:
            return ApiError(
                ErrorKind.DELIVERY,
                f"Failed to send newsletter: {result.response}",
                details={"recipient_count": len(recipients)},
            )

        self.log.info("Newsletter sent successfully", extra={"email_id": result.message_id})
        self.metrics.add_count_metric("RecipientCount", len(recipients))

        self.record_send(datastore, request, len(recipients))

        return NewsletterResponse(recipient_count=len(recipients), email_id=result.message_id)

    def collect_recipients(self, datastore: Datastore) -> Union[List[str], ApiError]:
        try:
            subscriptions = datastore.list_active_subscriptions()
        except DatastoreError as e:
            return ApiError(ErrorKind.STORAGE, str(e), cause=e)

        try:
            profile_emails = datastore.list_profile_emails()
        except DatastoreError as e:
            return ApiError(ErrorKind.STORAGE, str(e), cause=e)

        subscription_emails = [subscription.email for subscription in subscriptions]
        recipients = merge_recipients(subscription_emails, profile_emails)
        self.log.info(
            "Recipient emails deduplicated",
            extra={
                "subscription_emails": len(subscription_emails),
                "user_emails": len(profile_emails),
                "total_unique_emails": len(recipients),
                "sample_emails": recipients[:RECIPIENT_SAMPLE_SIZE],
            },
        )
        return recipients

    def record_send(
        self, datastore: Datastore, request: NewsletterRequest, recipient_count: int
    ) -> None:
        record = NewsletterSendRecord(
            subject=request.subject,
            content=request.content,
            sent_at=datetime.now(timezone.utc).isoformat(),
            recipient_count=recipient_count,
        )
        try:
            datastore.insert_newsletter_send(record)
        except DatastoreError as e:
            # the newsletter is already out, so the outcome stays a success
            self.log.error(
                "Failed to record newsletter send", exc_info=e, extra=error_fields(e)
            )
            return
        self.log.info("Newsletter send recorded successfully")


handler = NewsletterBroadcastHandler.get_handler()
