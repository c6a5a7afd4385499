"""Lambda handler implementations.

Contains the notification handlers deployed behind the website:
- Contact form intake and admin notification
- Admin replies to contact messages
- Newsletter broadcasts
"""
