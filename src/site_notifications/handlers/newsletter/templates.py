"""HTML email body for newsletters."""

from site_notifications.common.html import escape_html, newlines_to_br


def render_newsletter(content: str, site_name: str) -> str:
    """Render a newsletter.

    `content` is authored by an admin and may contain markup, so it is embedded
    as-is with newlines turned into line breaks.
    """
    return f"""
      <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
        <div style="text-align: center; padding: 20px 0;">
          <h1 style="color: #333; margin: 0;">{escape_html(site_name)}</h1>
          <p style="color: #666; margin: 5px 0;">Architectural &amp; Construction Excellence</p>
        </div>
        <div style="background-color: #f5f5f5; padding: 20px; border-radius: 8px; margin: 20px 0;">
          {newlines_to_br(content)}
        </div>
        <div style="text-align: center; padding: 20px 0; border-top: 1px solid #eee; margin-top: 20px;">
          <p style="color: #666; font-size: 14px; margin: 0;">
            You're receiving this because you subscribed to our newsletter.
          </p>
          <p style="color: #666; font-size: 14px; margin: 5px 0;">
            <a href="#" style="color: #007bff; text-decoration: none;">Unsubscribe</a> |
            <a href="#" style="color: #007bff; text-decoration: none;">Update Preferences</a>
          </p>
        </div>
      </div>
    """
