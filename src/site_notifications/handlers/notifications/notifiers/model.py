"""Notifier data models.

Defines the email message and delivery result models for notifiers.
"""

from dataclasses import dataclass
from typing import List, Optional

from aibs_informatics_core.models.base import (
    BooleanField,
    ListField,
    SchemaModel,
    StringField,
    custom_field,
)


@dataclass
class EmailMessage(SchemaModel):
    """An HTML email to deliver.

    Attributes:
        source: Sender address, optionally with a display name (`Name <address>`).
        recipients: Addresses sent to in a single delivery call.
        subject: Subject line.
        html: Rendered HTML body.
    """

    source: str = custom_field(mm_field=StringField())
    recipients: List[str] = custom_field(mm_field=ListField(StringField()))
    subject: str = custom_field(mm_field=StringField())
    html: str = custom_field(mm_field=StringField())


@dataclass
class NotifierResult(SchemaModel):
    """Outcome of a delivery call.

    Attributes:
        success: Whether the provider accepted the message.
        response: Serialized provider response, or the error message on failure.
        message_id: Provider message id when the message was accepted.
    """

    success: bool = custom_field(mm_field=BooleanField())
    response: str = custom_field(mm_field=StringField())
    message_id: Optional[str] = custom_field(mm_field=StringField(allow_none=True), default=None)
