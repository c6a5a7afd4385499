"""Records owned by the managed datastore."""

from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Dict, Optional, Type, TypeVar

from aibs_informatics_core.models.base import (
    BooleanField,
    IntegerField,
    SchemaModel,
    StringField,
    custom_field,
)

CONTACT_MESSAGES_TABLE = "contact_messages"
EMAIL_SUBSCRIPTIONS_TABLE = "email_subscriptions"
NEWSLETTER_SENDS_TABLE = "newsletter_sends"
PROFILES_TABLE = "profiles"

ADMIN_ROLE = "admin"

ROW = TypeVar("ROW", bound="DatastoreRecord")


class ContactStatus(str, Enum):
    PENDING = "pending"
    REPLIED = "replied"


@dataclass
class DatastoreRecord(SchemaModel):
    @classmethod
    def from_row(cls: Type[ROW], row: Dict[str, Any]) -> ROW:
        """Load a record from a datastore row, ignoring columns the model does not declare."""
        field_names = {f.name for f in fields(cls)}
        return cls.from_dict({k: v for k, v in row.items() if k in field_names})


@dataclass
class ContactMessage(DatastoreRecord):
    """A contact form submission.

    `status` moves from `pending` to `replied` when an admin replies.
    Text fields hold the HTML-escaped form of the submitted values.
    """

    id: str = custom_field(mm_field=StringField())
    name: str = custom_field(mm_field=StringField())
    email: str = custom_field(mm_field=StringField())
    subject: str = custom_field(mm_field=StringField())
    message: str = custom_field(mm_field=StringField())
    status: str = custom_field(mm_field=StringField(), default=ContactStatus.PENDING.value)
    reply: Optional[str] = custom_field(mm_field=StringField(allow_none=True), default=None)
    reply_subject: Optional[str] = custom_field(
        mm_field=StringField(allow_none=True), default=None
    )
    reply_sent_at: Optional[str] = custom_field(
        mm_field=StringField(allow_none=True), default=None
    )
    created_at: Optional[str] = custom_field(mm_field=StringField(allow_none=True), default=None)
    updated_at: Optional[str] = custom_field(mm_field=StringField(allow_none=True), default=None)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "ContactMessage":
        # ids may be serial integers or uuids depending on the table definition
        return super().from_row({**row, "id": str(row["id"])})


@dataclass
class ContactReplyUpdate(SchemaModel):
    """Columns written when a reply is sent. Applied in a single update call."""

    reply: str = custom_field(mm_field=StringField())
    reply_subject: str = custom_field(mm_field=StringField())
    reply_sent_at: str = custom_field(mm_field=StringField())
    updated_at: str = custom_field(mm_field=StringField())
    status: str = custom_field(mm_field=StringField(), default=ContactStatus.REPLIED.value)


@dataclass
class EmailSubscription(DatastoreRecord):
    email: str = custom_field(mm_field=StringField())
    is_active: bool = custom_field(mm_field=BooleanField(), default=True)


@dataclass
class NewsletterSendRecord(DatastoreRecord):
    """Audit row written after a newsletter was sent."""

    subject: str = custom_field(mm_field=StringField())
    content: str = custom_field(mm_field=StringField())
    sent_at: str = custom_field(mm_field=StringField())
    recipient_count: int = custom_field(mm_field=IntegerField())


@dataclass
class AuthenticatedUser(SchemaModel):
    id: str = custom_field(mm_field=StringField())
    email: Optional[str] = custom_field(mm_field=StringField(allow_none=True), default=None)
