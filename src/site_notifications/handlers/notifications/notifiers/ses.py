"""SES email notification delivery.

Provides HTML email delivery via Amazon Simple Email Service (SES).
"""

import json
from dataclasses import dataclass
from functools import lru_cache

from aibs_informatics_aws_utils.ses import send_email

from site_notifications.handlers.notifications.notifiers.base import Notifier
from site_notifications.handlers.notifications.notifiers.model import EmailMessage, NotifierResult

CHARSET = "UTF-8"


@dataclass
class SESNotifier(Notifier):
    """Notifier sending HTML emails through Amazon SES.

    All recipients of a message are addressed in a single `SendEmail` call.
    The SES client and region are resolved from the AWS environment.

    Example:
        ```python
        notifier = SESNotifier()
        result = notifier.notify(
            EmailMessage(
                source="Site <noreply@example.com>",
                recipients=["user@example.com"],
                subject="Hello",
                html="<p>World</p>",
            )
        )
        ```
    """

    def notify(self, message: EmailMessage) -> NotifierResult:
        """Send an HTML email via SES.

        Args:
            message (EmailMessage): The email to send.

        Returns:
            Result indicating success or failure, with the SES message id on success.
        """
        try:
            response = send_email(
                {
                    "Source": message.source,
                    "Destination": {"ToAddresses": list(message.recipients)},
                    "Message": {
                        "Subject": {"Data": message.subject, "Charset": CHARSET},
                        "Body": {"Html": {"Data": message.html, "Charset": CHARSET}},
                    },
                }
            )
            return NotifierResult(
                response=json.dumps(response, default=str),
                success=(200 <= response["ResponseMetadata"]["HTTPStatusCode"] < 300),
                message_id=response.get("MessageId"),
            )
        except Exception as e:
            return NotifierResult(response=str(e), success=False)


@lru_cache(maxsize=None)
def get_notifier() -> SESNotifier:
    """Notifier of this process."""
    return SESNotifier()
