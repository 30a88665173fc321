"""
Application services package.

Contains the portal API client, query cache, chat channels, the notifier
and the PortalService facade (import it from
``application.services.portal_service``).
"""

from application.services.notifier import Notifier, Toast

__all__ = ["Notifier", "Toast"]
