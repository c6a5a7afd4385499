from dataclasses import dataclass
from typing import List, Optional

from aibs_informatics_core.models.base import (
    BooleanField,
    SchemaModel,
    StringField,
    custom_field,
)

from site_notifications.common.html import escape_html

CONTACT_FIELDS = ("name", "email", "subject", "message")


# ----------------------------------------------------------
# Intake
# ----------------------------------------------------------
@dataclass
class ContactSubmission(SchemaModel):
    name: str = custom_field(mm_field=StringField(), default="")
    email: str = custom_field(mm_field=StringField(), default="")
    subject: str = custom_field(mm_field=StringField(), default="")
    message: str = custom_field(mm_field=StringField(), default="")

    def missing_fields(self) -> List[str]:
        return [name for name in CONTACT_FIELDS if not getattr(self, name)]

    def escaped(self) -> "ContactSubmission":
        """Copy of this submission with every field HTML-escaped."""
        return ContactSubmission(
            name=escape_html(self.name),
            email=escape_html(self.email),
            subject=escape_html(self.subject),
            message=escape_html(self.message),
        )


@dataclass
class ContactIntakeResponse(SchemaModel):
    contact_id: str = custom_field(mm_field=StringField(data_key="contactId"))
    email_id: Optional[str] = custom_field(
        mm_field=StringField(data_key="emailId", allow_none=True), default=None
    )
    success: bool = custom_field(mm_field=BooleanField(), default=True)


# ----------------------------------------------------------
# Reply
# ----------------------------------------------------------
@dataclass
class ContactReplyRequest(SchemaModel):
    message_id: str = custom_field(mm_field=StringField(), default="")
    reply: str = custom_field(mm_field=StringField(), default="")
    reply_subject: Optional[str] = custom_field(mm_field=StringField(allow_none=True), default=None)


@dataclass
class ContactReplyResponse(SchemaModel):
    message: str = custom_field(mm_field=StringField(), default="Reply sent successfully")
    success: bool = custom_field(mm_field=BooleanField(), default=True)
