from dataclasses import dataclass
from typing import Iterable, List, Optional

from aibs_informatics_core.models.base import (
    BooleanField,
    IntegerField,
    SchemaModel,
    StringField,
    custom_field,
)


@dataclass
class NewsletterRequest(SchemaModel):
    subject: str = custom_field(mm_field=StringField(), default="")
    content: str = custom_field(mm_field=StringField(), default="")


@dataclass
class NewsletterResponse(SchemaModel):
    recipient_count: int = custom_field(mm_field=IntegerField(data_key="recipientCount"))
    email_id: Optional[str] = custom_field(
        mm_field=StringField(data_key="emailId", allow_none=True), default=None
    )
    message: Optional[str] = custom_field(mm_field=StringField(allow_none=True), default=None)
    success: bool = custom_field(mm_field=BooleanField(), default=True)


def merge_recipients(*sources: Iterable[str]) -> List[str]:
    """Union of the given address lists without duplicates or empty entries.

    Addresses keep the order in which they are first seen.
    """
    recipients = dict.fromkeys(email for source in sources for email in source if email)
    return list(recipients)
