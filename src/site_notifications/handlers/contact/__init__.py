"""Contact form handlers: intake of new messages and admin replies."""
