"""Environment-backed configuration for the notification handlers."""

from dataclasses import dataclass
from functools import lru_cache
from typing import List

from aibs_informatics_core.exceptions import ApplicationException
from aibs_informatics_core.models.email_address import EmailAddress
from aibs_informatics_core.utils.os_operations import get_env_var

SUPABASE_URL_ENV_VAR = "SUPABASE_URL"
SUPABASE_SERVICE_ROLE_KEY_ENV_VAR = "SUPABASE_SERVICE_ROLE_KEY"
ADMIN_EMAIL_ENV_VAR = "ADMIN_EMAIL"
CONTACT_FROM_EMAIL_ENV_VAR = "CONTACT_FROM_EMAIL"
NEWSLETTER_FROM_EMAIL_ENV_VAR = "NEWSLETTER_FROM_EMAIL"
BROADCAST_FROM_EMAIL_ENV_VAR = "BROADCAST_FROM_EMAIL"
SITE_NAME_ENV_VAR = "SITE_NAME"

DEFAULT_ADMIN_EMAIL = "admin@efieplans.com"
DEFAULT_CONTACT_FROM_EMAIL = "Efie Plans <noreply@efieplans.com>"
DEFAULT_NEWSLETTER_FROM_EMAIL = "no-reply@efieplans.com"
DEFAULT_BROADCAST_FROM_EMAIL = "Efie Plans <newsletter@efieplans.com>"
DEFAULT_SITE_NAME = "Efie Plans"


class ConfigurationError(ApplicationException):
    pass


@dataclass
class NotificationSettings:
    """Configuration shared by the notification handlers.

    Attributes:
        supabase_url: Base URL of the managed datastore.
        supabase_service_role_key: Service credential for the datastore.
        admin_email: Recipient of new contact message notifications.
        contact_from_email: Sender of admin notifications.
        reply_from_email: Sender of contact replies.
        broadcast_from_email: Sender of newsletters.
        site_name: Name rendered into email templates.
    """

    supabase_url: str
    supabase_service_role_key: str
    admin_email: EmailAddress = EmailAddress(DEFAULT_ADMIN_EMAIL)
    contact_from_email: str = DEFAULT_CONTACT_FROM_EMAIL
    reply_from_email: str = DEFAULT_NEWSLETTER_FROM_EMAIL
    broadcast_from_email: str = DEFAULT_BROADCAST_FROM_EMAIL
    site_name: str = DEFAULT_SITE_NAME

    @classmethod
    def from_env(cls) -> "NotificationSettings":
        """Read the settings from environment variables.

        Raises:
            ConfigurationError: If the datastore URL or service credential is not set.
        """
        supabase_url = get_env_var(SUPABASE_URL_ENV_VAR)
        service_role_key = get_env_var(SUPABASE_SERVICE_ROLE_KEY_ENV_VAR)

        missing: List[str] = []
        if not supabase_url:
            missing.append(SUPABASE_URL_ENV_VAR)
        if not service_role_key:
            missing.append(SUPABASE_SERVICE_ROLE_KEY_ENV_VAR)
        if missing:
            raise ConfigurationError(
                f"Missing required environment variables: {' or '.join(missing)}"
            )

        return cls(
            supabase_url=supabase_url,
            supabase_service_role_key=service_role_key,
            admin_email=EmailAddress(
                get_env_var(ADMIN_EMAIL_ENV_VAR, default_value=DEFAULT_ADMIN_EMAIL)
            ),
            contact_from_email=get_env_var(
                CONTACT_FROM_EMAIL_ENV_VAR, default_value=DEFAULT_CONTACT_FROM_EMAIL
            ),
            reply_from_email=get_env_var(
                NEWSLETTER_FROM_EMAIL_ENV_VAR, default_value=DEFAULT_NEWSLETTER_FROM_EMAIL
            ),
            broadcast_from_email=get_env_var(
                BROADCAST_FROM_EMAIL_ENV_VAR, default_value=DEFAULT_BROADCAST_FROM_EMAIL
            ),
            site_name=get_env_var(SITE_NAME_ENV_VAR, default_value=DEFAULT_SITE_NAME),
        )


@lru_cache(maxsize=None)
def get_settings() -> NotificationSettings:
    """Settings of this process, read from the environment on first use."""
    return NotificationSettings.from_env()
