"""HTML sanitizing and input validation helpers for email rendering."""

import html
import re

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def escape_html(text: str) -> str:
    """Escape `& < > " '` as `&amp; &lt; &gt; &quot; &#x27;`.

    Untrusted text must pass through here before it is stored or rendered
    into an email body.
    """
    return html.escape(text, quote=True)


def newlines_to_br(text: str) -> str:
    return text.replace("\n", "<br>")


def is_valid_email(email: str) -> bool:
    """True for `local@domain.tld` shaped strings: one `@`, a `.` after it, no whitespace."""
    return EMAIL_PATTERN.match(email) is not None
