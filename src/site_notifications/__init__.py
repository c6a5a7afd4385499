"""Site notification Lambda handlers.

Provides the contact-form intake, contact reply and newsletter broadcast handlers,
along with the shared handler base classes, logging, metrics, the datastore
abstraction and email notifiers they are built on.
"""
