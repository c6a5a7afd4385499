"""Email notifiers used to deliver notification emails."""
