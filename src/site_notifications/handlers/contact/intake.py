from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Optional, Union

from site_notifications.common.api.handler import ApiLambdaHandler
from site_notifications.common.api.model import ApiError, ErrorKind
from site_notifications.common.html import is_valid_email
from site_notifications.common.settings import NotificationSettings, get_settings
from site_notifications.datastore.base import Datastore, DatastoreError
from site_notifications.datastore.model import ContactMessage
from site_notifications.datastore.supabase_datastore import get_datastore
from site_notifications.handlers.contact.model import ContactIntakeResponse, ContactSubmission
from site_notifications.handlers.contact.templates import (
    admin_notification_subject,
    render_admin_notification,
)
from site_notifications.handlers.notifications.notifiers.base import Notifier
from site_notifications.handlers.notifications.notifiers.model import EmailMessage
from site_notifications.handlers.notifications.notifiers.ses import get_notifier

RECORD_KEY = "record"


@dataclass
class ContactIntakeHandler(ApiLambdaHandler[ContactSubmission, ContactIntakeResponse]):
    """Stores a contact form submission and notifies the site administrator.

    The submission is validated, HTML-escaped, stored as a `pending` contact
    message and then sent to the admin address. If the notification fails the
    stored message is kept.
    """

    settings: NotificationSettings = field(default_factory=get_settings)
    datastore: Datastore = field(default_factory=get_datastore)
    notifier: Notifier = field(default_factory=get_notifier)

    log_context: ClassVar[str] = "CONTACT_NOTIFICATION"
    cors_allow_headers: ClassVar[str] = (
        "authorization, x-client-info, apikey, content-type, x-requested-with"
    )
    cors_allow_methods: ClassVar[str] = "POST, OPTIONS, GET"
    cors_max_age: ClassVar[Optional[int]] = 86400

    def parse_body(self, body: Dict[str, Any]) -> Dict[str, Any]:
        # Database webhooks deliver the submission under "record"
        record = body.get(RECORD_KEY)
        if isinstance(record, dict):
            return record
        return body

    def handle(self, request: ContactSubmission) -> Union[ContactIntakeResponse, ApiError]:
        validation_error = self.validate(request)
        if validation_error:
            return validation_error

        submission = request.escaped()
        self.log.info(
            "Validation passed, storing contact message", extra={"email": submission.email}
        )

        contact_message = self.store(submission)
        if isinstance(contact_message, ApiError):
            return contact_message
        self.log.info(
            "Contact message stored successfully", extra={"contact_id": contact_message.id}
        )

        self.log.info("Sending admin notification email")
        result = self.notifier.notify(
            EmailMessage(
                source=self.settings.contact_from_email,
                recipients=[self.settings.admin_email],
                subject=admin_notification_subject(submission),
                html=render_admin_notification(submission),
            )
        )
        if not result.success:
            return ApiError(
                ErrorKind.DELIVERY,
                f"Failed to send admin notification: {result.response}",
                details={"contact_id": contact_message.id},
            )

        self.log.info("Admin notification sent successfully", extra={"email_id": result.message_id})
        return ContactIntakeResponse(contact_id=contact_message.id, email_id=result.message_id)

    def validate(self, request: ContactSubmission) -> Optional[ApiError]:
        if request.missing_fields():
            return ApiError(
                ErrorKind.VALIDATION,
                "Missing required fields: name, email, subject, message",
                details={"missing": request.missing_fields()},
            )
        if not is_valid_email(request.email):
            return ApiError(ErrorKind.VALIDATION, "Invalid email format")
        return None

    def store(self, submission: ContactSubmission) -> Union[ContactMessage, ApiError]:
        try:
            return self.datastore.insert_contact_message(
                name=submission.name,
                email=submission.email,
                subject=submission.subject,
                message=submission.message,
            )
        except DatastoreError as e:
            return ApiError(ErrorKind.STORAGE, str(e), cause=e, details={"email": submission.email})


handler = ContactIntakeHandler.get_handler()
