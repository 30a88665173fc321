"""Transient user-facing notifications (toasts)."""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from common.exception.exceptions import PortalError

logger = logging.getLogger(__name__)

DEFAULT = "default"
DESTRUCTIVE = "destructive"


@dataclass(frozen=True)
class Toast:
    title: str
    description: str = ""
    variant: str = DEFAULT


ToastListener = Callable[[Toast], None]


class Notifier:
    """Collects toasts and forwards them to listeners (a UI, a terminal)."""

    def __init__(self):
        self.toasts: List[Toast] = []
        self._listeners: List[ToastListener] = []

    def add_listener(self, listener: ToastListener) -> None:
        self._listeners.append(listener)

    def notify(self, title: str, description: str = "", variant: str = DEFAULT) -> Toast:
        toast = Toast(title=title, description=description, variant=variant)
        self.toasts.append(toast)
        if variant == DESTRUCTIVE:
            logger.warning(f"{title}: {description}")
        else:
            logger.info(f"{title}: {description}")
        for listener in list(self._listeners):
            listener(toast)
        return toast

    def success(self, title: str, description: str = "") -> Toast:
        return self.notify(title, description)

    def error(self, error: Exception, title: str = "Error", fallback: Optional[str] = None) -> Toast:
        """Show a destructive toast carrying the server message or a fallback."""
        if isinstance(error, PortalError) and error.message:
            description = error.message
        else:
            description = fallback or str(error) or "Something went wrong"
        return self.notify(title, description, DESTRUCTIVE)

    @property
    def last(self) -> Optional[Toast]:
        return self.toasts[-1] if self.toasts else None

    def clear(self) -> None:
        self.toasts.clear()
