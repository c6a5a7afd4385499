from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, ClassVar, Dict, Optional, Union

from site_notifications.common.api.handler import AUTHORIZATION_HEADER, ApiLambdaHandler
from site_notifications.common.api.model import ApiError, ErrorKind
from site_notifications.common.settings import NotificationSettings, get_settings
from site_notifications.datastore.base import Datastore, DatastoreError
from site_notifications.datastore.model import ADMIN_ROLE, ContactMessage, ContactReplyUpdate
from site_notifications.datastore.supabase_datastore import get_datastore
from site_notifications.handlers.contact.model import ContactReplyRequest, ContactReplyResponse
from site_notifications.handlers.contact.templates import default_reply_subject, render_reply
from site_notifications.handlers.notifications.notifiers.base import Notifier
from site_notifications.handlers.notifications.notifiers.model import EmailMessage
from site_notifications.handlers.notifications.notifiers.ses import get_notifier

BEARER_PREFIX = "Bearer "


@dataclass
class ContactReplyHandler(ApiLambdaHandler[ContactReplyRequest, ContactReplyResponse]):
    """Sends an admin's reply to the author of a contact message.

    Only callers presenting a valid bearer token for a profile with the `admin`
    role may reply. The contact message is marked `replied` before the email is
    sent, and stays `replied` if sending fails.
    """

    settings: NotificationSettings = field(default_factory=get_settings)
    datastore: Datastore = field(default_factory=get_datastore)
    notifier: Notifier = field(default_factory=get_notifier)

    log_context: ClassVar[str] = "CONTACT_REPLY"

    def authorize(self) -> Optional[ApiError]:
        auth_header = self.get_header(AUTHORIZATION_HEADER)
        if not auth_header or not auth_header.startswith(BEARER_PREFIX):
            return ApiError(
                ErrorKind.UNAUTHORIZED, "Unauthorized - Missing or invalid Authorization header"
            )

        token = auth_header[len(BEARER_PREFIX) :]
        try:
            user = self.datastore.get_authenticated_user(token)
        except DatastoreError as e:
            return ApiError(ErrorKind.UNAUTHORIZED, "Unauthorized - Invalid token", cause=e)
        if user is None:
            return ApiError(ErrorKind.UNAUTHORIZED, "Unauthorized - Invalid token")

        try:
            role = self.datastore.get_profile_role(user.id)
        except DatastoreError as e:
            return ApiError(
                ErrorKind.FORBIDDEN,
                "Forbidden - Admin access required",
                cause=e,
                details={"user_id": user.id},
            )
        if role != ADMIN_ROLE:
            return ApiError(
                ErrorKind.FORBIDDEN,
                "Forbidden - Admin access required",
                details={"user_id": user.id, "role": role},
            )

        self.log.info("Admin caller authorized", extra={"user_id": user.id})
        return None

    def parse_body(self, body: Dict[str, Any]) -> Dict[str, Any]:
        message_id = body.get("message_id")
        if isinstance(message_id, int) and not isinstance(message_id, bool):
            return {**body, "message_id": str(message_id)}
        return body

    def handle(self, request: ContactReplyRequest) -> Union[ContactReplyResponse, ApiError]:
        if not request.message_id or not request.reply:
            return ApiError(ErrorKind.VALIDATION, "message_id and reply are required")

        self.log.info("Processing reply request", extra={"message_id": request.message_id})

        contact_message = self.fetch(request.message_id)
        if isinstance(contact_message, ApiError):
            return contact_message

        reply_subject = request.reply_subject or default_reply_subject(contact_message)

        update_error = self.mark_replied(contact_message, request.reply, reply_subject)
        if update_error:
            return update_error
        self.log.info(
            "Contact message updated successfully", extra={"message_id": contact_message.id}
        )

        result = self.notifier.notify(
            EmailMessage(
                source=self.settings.reply_from_email,
                recipients=[contact_message.email],
                subject=reply_subject,
                html=render_reply(contact_message, request.reply, self.settings.site_name),
            )
        )
        if not result.success:
            return ApiError(
                ErrorKind.DELIVERY,
                "Failed to send email",
                details={"to": contact_message.email, "provider_response": result.response},
            )

        self.log.info(
            "Reply email sent successfully",
            extra={"to": contact_message.email, "email_id": result.message_id},
        )
        return ContactReplyResponse()

    def fetch(self, message_id: str) -> Union[ContactMessage, ApiError]:
        try:
            contact_message = self.datastore.get_contact_message(message_id)
        except DatastoreError as e:
            return ApiError(
                ErrorKind.STORAGE,
                "Failed to fetch contact message",
                cause=e,
                details={"message_id": message_id},
            )
        if contact_message is None:
            return ApiError(
                ErrorKind.NOT_FOUND, "Contact message not found", details={"message_id": message_id}
            )
        return contact_message

    def mark_replied(
        self, contact_message: ContactMessage, reply: str, reply_subject: str
    ) -> Optional[ApiError]:
        now = datetime.now(timezone.utc).isoformat()
        update = ContactReplyUpdate(
            reply=reply,
            reply_subject=reply_subject,
            reply_sent_at=now,
            updated_at=now,
        )
        try:
            self.datastore.update_contact_message(contact_message.id, update)
        except DatastoreError as e:
            return ApiError(
                ErrorKind.STORAGE,
                "Failed to update contact message",
                cause=e,
                details={"message_id": contact_message.id},
            )
        return None


handler = ContactReplyHandler.get_handler()
