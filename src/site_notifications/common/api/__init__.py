"""API Gateway adapter for the notification handlers."""
