"""Chat widget state machine."""

import logging
from enum import Enum
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


class ChatWidgetState(str, Enum):
    MINIMIZED = "minimized"
    OPEN = "open"  # open, no counterparty selected
    SELECTED = "selected"  # open with a counterparty selected


class ChatWidget:
    """Tracks whether the widget is open and which counterparty is selected.

    Transitions::

        minimized --open--> open --select--> selected
        selected --select--> selected (different counterparty)
        selected --back--> open
        any --minimize--> minimized

    Minimizing drops the selection, so reopening starts from the
    conversation list.
    """

    def __init__(self):
        self.state = ChatWidgetState.MINIMIZED
        self.selected_id: Optional[int] = None
        self._listeners: List[Callable[["ChatWidget"], None]] = []

    @property
    def is_open(self) -> bool:
        return self.state != ChatWidgetState.MINIMIZED

    def add_listener(self, listener: Callable[["ChatWidget"], None]) -> None:
        self._listeners.append(listener)

    def open(self) -> None:
        if self.state == ChatWidgetState.MINIMIZED:
            self._transition(ChatWidgetState.OPEN, None)

    def select(self, counterparty_id: int) -> None:
        if not self.is_open:
            raise RuntimeError("Cannot select a conversation while the chat is minimized")
        if self.state == ChatWidgetState.SELECTED and self.selected_id == counterparty_id:
            return
        self._transition(ChatWidgetState.SELECTED, counterparty_id)

    def back(self) -> None:
        if self.state == ChatWidgetState.SELECTED:
            self._transition(ChatWidgetState.OPEN, None)

    def minimize(self) -> None:
        if self.state != ChatWidgetState.MINIMIZED:
            self._transition(ChatWidgetState.MINIMIZED, None)

    def _transition(self, state: ChatWidgetState, selected_id: Optional[int]) -> None:
        logger.debug(f"Chat widget {self.state.value} -> {state.value} (selected: {selected_id})")
        self.state = state
        self.selected_id = selected_id
        for listener in list(self._listeners):
            listener(self)
