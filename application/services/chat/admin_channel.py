"""
Admin side of the support chat.

Two read models poll while the widget is open:

- the conversation list (``admin-chat-users``), independent of selection
- the selected counterparty's messages (``admin-chat-messages``, user_id)

The message subscription only exists while a counterparty is selected.
Switching counterparties re-keys it, so a late response for the previous
counterparty lands in that counterparty's cache entry and is never shown
under the new one.
"""

import logging
from typing import Callable, List, Optional

from application.models.response_models import ChatMessage, ChatUser
from application.routes.guard import handle_unauthorized
from application.services.api.chat import ChatOperations
from application.services.chat.messages import filter_users, parse_messages, parse_users
from application.services.chat.widget import ChatWidget, ChatWidgetState
from application.services.notifier import Notifier
from application.services.query import (
    Mutation,
    QueryClient,
    QueryOptions,
    QueryState,
    QuerySubscription,
    make_key,
)
from application.services.query.keys import ADMIN_CHAT_MESSAGES, ADMIN_CHAT_USERS
from common.config.config import CHAT_MESSAGES_POLL_SECONDS, CHAT_USERS_POLL_SECONDS
from common.exception.exceptions import PortalError, UnauthorizedError

logger = logging.getLogger(__name__)

SEND_ERROR_TITLE = "Error sending message"
SEND_ERROR_FALLBACK = "Failed to send message"


class AdminChatChannel:
    """Headless admin chat widget backed by the query cache."""

    def __init__(
        self,
        query_client: QueryClient,
        chat: ChatOperations,
        notifier: Optional[Notifier] = None,
        users_interval: float = CHAT_USERS_POLL_SECONDS,
        messages_interval: float = CHAT_MESSAGES_POLL_SECONDS,
    ):
        self.query_client = query_client
        self.chat = chat
        self.notifier = notifier or Notifier()
        self.users_interval = users_interval
        self.messages_interval = messages_interval

        self.widget = ChatWidget()
        self.search = ""
        self.input = ""
        self.redirect_to: Optional[str] = None
        self.send_mutation: Optional[Mutation] = None
        self._message_listeners: List[Callable[[QueryState], None]] = []

        self._users_sub = query_client.subscribe(
            make_key(ADMIN_CHAT_USERS),
            chat.get_admin_users,
            QueryOptions(refetch_interval=users_interval, enabled=False),
        )
        self._messages_sub: Optional[QuerySubscription] = None
        self.widget.add_listener(lambda _: self._sync_subscriptions())

    # Widget transitions

    def open(self) -> None:
        self.widget.open()

    def minimize(self) -> None:
        self.widget.minimize()

    def select(self, user_id: int) -> None:
        self.widget.select(user_id)

    def back(self) -> None:
        self.widget.back()

    @property
    def state(self) -> ChatWidgetState:
        return self.widget.state

    @property
    def selected_user_id(self) -> Optional[int]:
        return self.widget.selected_id

    # Read models

    @property
    def users(self) -> List[ChatUser]:
        return filter_users(parse_users(self._users_sub.data), self.search)

    @property
    def selected_user(self) -> Optional[ChatUser]:
        for user in parse_users(self._users_sub.data):
            if user.id == self.selected_user_id:
                return user
        return None

    @property
    def messages(self) -> List[ChatMessage]:
        if self._messages_sub is None:
            return []
        return parse_messages(self._messages_sub.data)

    @property
    def users_subscription(self) -> QuerySubscription:
        return self._users_sub

    @property
    def messages_subscription(self) -> Optional[QuerySubscription]:
        return self._messages_sub

    def on_messages(self, listener: Callable[[QueryState], None]) -> None:
        """Register a listener for the selected conversation's state changes."""
        self._message_listeners.append(listener)
        if self._messages_sub is not None:
            self._messages_sub.on_change(listener)

    # Sending

    async def send(self, text: Optional[str] = None) -> bool:
        """Send ``text`` (or the current input) to the selected counterparty.

        Returns:
            True when the message was accepted; blank input or no selection
            sends nothing and returns False
        """
        if text is not None:
            self.input = text
        message = self.input.strip()
        user_id = self.selected_user_id
        if not message or user_id is None:
            return False

        self.send_mutation = Mutation(
            self.query_client,
            self.chat.send_admin_message,
            invalidates=[make_key(ADMIN_CHAT_MESSAGES, user_id), make_key(ADMIN_CHAT_USERS)],
            on_success=lambda _: self._clear_input(),
        )
        try:
            await self.send_mutation.mutate(message, user_id)
        except UnauthorizedError as e:
            self.redirect_to = handle_unauthorized(e, self.notifier)
            self.minimize()
            return False
        except PortalError as e:
            self.notifier.error(e, title=SEND_ERROR_TITLE, fallback=SEND_ERROR_FALLBACK)
            return False
        return True

    def close(self) -> None:
        """Drop both subscriptions."""
        self.widget.minimize()
        self._users_sub.unsubscribe()

    def _clear_input(self) -> None:
        self.input = ""

    def _sync_subscriptions(self) -> None:
        self._users_sub.set_enabled(self.widget.is_open)

        user_id = self.widget.selected_id
        if self.widget.state != ChatWidgetState.SELECTED or user_id is None:
            if self._messages_sub is not None:
                self._messages_sub.unsubscribe()
                self._messages_sub = None
            return

        key = make_key(ADMIN_CHAT_MESSAGES, user_id)
        fetcher = self._messages_fetcher(user_id)
        if self._messages_sub is None:
            self._messages_sub = self.query_client.subscribe(
                key, fetcher, QueryOptions(refetch_interval=self.messages_interval)
            )
            for listener in self._message_listeners:
                self._messages_sub.on_change(listener)
        elif self._messages_sub.key != key:
            self._messages_sub.set_key(key, fetcher)
        logger.info(f"Admin chat polling messages for user {user_id}")

    def _messages_fetcher(self, user_id: int):
        async def fetch():
            return await self.chat.get_admin_messages(user_id)

        return fetch
