"""Newsletter broadcast handler."""
