"""HTML email bodies for contact notifications and replies.

Every value interpolated here must already be HTML-escaped or be escaped here.
"""

from site_notifications.common.html import escape_html, newlines_to_br
from site_notifications.datastore.model import ContactMessage
from site_notifications.handlers.contact.model import ContactSubmission

DEFAULT_REPLY_SUBJECT_TOPIC = "Your Contact Message"


def admin_notification_subject(submission: ContactSubmission) -> str:
    return f"New Contact Message: {submission.subject}"


def render_admin_notification(submission: ContactSubmission) -> str:
    """Render the admin notification for an already escaped submission."""
    return f"""
        <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
          <h2 style="color: #333;">New Contact Message Received</h2>
          <div style="background-color: #f5f5f5; padding: 20px; border-radius: 8px; margin: 20px 0;">
            <p><strong>From:</strong> {submission.name}</p>
            <p><strong>Email:</strong> {submission.email}</p>
            <p><strong>Subject:</strong> {submission.subject}</p>
            <p><strong>Message:</strong></p>
            <div style="background-color: white; padding: 15px; border-radius: 4px; border-left: 4px solid #007bff;">
              {newlines_to_br(submission.message)}
            </div>
          </div>
          <p style="color: #666; font-size: 14px;">
            This message was sent from your website contact form.
          </p>
        </div>
    """


def default_reply_subject(contact_message: ContactMessage) -> str:
    return f"Re: {contact_message.subject or DEFAULT_REPLY_SUBJECT_TOPIC}"


def render_reply(contact_message: ContactMessage, reply: str, site_name: str) -> str:
    """Render a reply to a contact message, quoting the original message."""
    return f"""
      <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
        <h2 style="color: #333;">Thank you for contacting {escape_html(site_name)}</h2>
        <div style="background-color: #f5f5f5; padding: 20px; border-radius: 8px; margin: 20px 0;">
          <p>Dear {escape_html(contact_message.name)},</p>
          <div style="background-color: white; padding: 15px; border-radius: 4px; border-left: 4px solid #28a745;">
            {newlines_to_br(escape_html(reply))}
          </div>
        </div>
        <hr style="border: none; border-top: 1px solid #eee; margin: 20px 0;">
        <div style="background-color: #f9f9f9; padding: 15px; border-radius: 4px; font-size: 14px; color: #666;">
          <p><strong>Your original message:</strong></p>
          <p><em>{newlines_to_br(escape_html(contact_message.message))}</em></p>
        </div>
        <p style="color: #666; font-size: 14px; margin-top: 20px;">
          Best regards,<br>
          The {escape_html(site_name)} Team
        </p>
      </div>
    """
