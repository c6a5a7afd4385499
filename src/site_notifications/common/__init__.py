"""Common Lambda utilities and base classes.

Provides the base handler classes, the API Gateway adapter, logging, metrics,
settings and HTML helpers shared by all notification handlers.
"""
