"""Customer side of the support chat: one message list polled while open."""

import logging
from typing import Callable, List, Optional

from application.models.response_models import ChatMessage
from application.routes.guard import handle_unauthorized
from application.services.api.chat import ChatOperations
from application.services.chat.admin_channel import SEND_ERROR_FALLBACK, SEND_ERROR_TITLE
from application.services.chat.messages import parse_messages
from application.services.chat.widget import ChatWidget, ChatWidgetState
from application.services.notifier import Notifier
from application.services.query import Mutation, QueryClient, QueryOptions, QueryState, make_key
from application.services.query.keys import USER_CHAT_MESSAGES
from common.config.config import CHAT_MESSAGES_POLL_SECONDS
from common.exception.exceptions import PortalError, UnauthorizedError

logger = logging.getLogger(__name__)


class CustomerChatChannel:
    def __init__(
        self,
        query_client: QueryClient,
        chat: ChatOperations,
        notifier: Optional[Notifier] = None,
        messages_interval: float = CHAT_MESSAGES_POLL_SECONDS,
    ):
        self.query_client = query_client
        self.chat = chat
        self.notifier = notifier or Notifier()
        self.widget = ChatWidget()
        self.input = ""
        self.redirect_to: Optional[str] = None
        self.send_mutation = Mutation(
            query_client,
            chat.send_user_message,
            invalidates=[make_key(USER_CHAT_MESSAGES)],
            on_success=lambda _: self._clear_input(),
        )
        self._messages_sub = query_client.subscribe(
            make_key(USER_CHAT_MESSAGES),
            chat.get_user_messages,
            QueryOptions(refetch_interval=messages_interval, enabled=False),
        )
        self.widget.add_listener(lambda widget: self._messages_sub.set_enabled(widget.is_open))

    def open(self) -> None:
        self.widget.open()

    def minimize(self) -> None:
        self.widget.minimize()

    @property
    def state(self) -> ChatWidgetState:
        return self.widget.state

    @property
    def messages(self) -> List[ChatMessage]:
        return parse_messages(self._messages_sub.data)

    @property
    def messages_subscription(self):
        return self._messages_sub

    def on_messages(self, listener: Callable[[QueryState], None]) -> Callable[[], None]:
        return self._messages_sub.on_change(listener)

    async def send(self, text: Optional[str] = None) -> bool:
        if text is not None:
            self.input = text
        message = self.input.strip()
        if not message:
            return False
        try:
            await self.send_mutation.mutate(message)
        except UnauthorizedError as e:
            self.redirect_to = handle_unauthorized(e, self.notifier)
            self.minimize()
            return False
        except PortalError as e:
            self.notifier.error(e, title=SEND_ERROR_TITLE, fallback=SEND_ERROR_FALLBACK)
            return False
        logger.info("Customer chat message sent")
        return True

    def close(self) -> None:
        self.widget.minimize()
        self._messages_sub.unsubscribe()

    def _clear_input(self) -> None:
        self.input = ""
