"""Unit tests for CustomerChatChannel."""

import asyncio
from unittest.mock import AsyncMock, Mock

import pytest

from application.services.chat import ChatWidgetState, CustomerChatChannel
from application.services.notifier import Notifier
from application.services.query import QueryClient
from common.exception.exceptions import TransportError, UnauthorizedError
from tests.fixtures.portal_fixtures import create_chat_message, create_sessions, envelope, settle

MESSAGES_KEY = ("user-chat-messages",)


def make_chat_ops():
    chat = Mock()
    chat.get_user_messages = AsyncMock(
        return_value=envelope(
            [
                create_chat_message(1, "Hello", sender_type="user"),
                create_chat_message(2, "How can we help?", sender_type="admin", sender_name="Support"),
            ]
        )
    )
    chat.send_user_message = AsyncMock(return_value=envelope({"id": 3}))
    return chat


class TestCustomerChatChannel:
    @pytest.mark.asyncio
    async def test_polls_only_while_open(self):
        client = QueryClient()
        chat = make_chat_ops()
        channel = CustomerChatChannel(client, chat, messages_interval=0.01)

        await asyncio.sleep(0.02)
        chat.get_user_messages.assert_not_called()

        channel.open()
        await asyncio.sleep(0.05)
        assert channel.state == ChatWidgetState.OPEN
        assert chat.get_user_messages.call_count >= 3
        assert [m.sender_type for m in channel.messages] == ["user", "admin"]

        channel.minimize()
        await settle()
        calls = chat.get_user_messages.call_count
        await asyncio.sleep(0.04)

        assert not client.is_polling(MESSAGES_KEY)
        assert chat.get_user_messages.call_count == calls
        client.close()

    @pytest.mark.asyncio
    async def test_send_invalidates_messages_and_clears_input(self):
        client = QueryClient()
        chat = make_chat_ops()
        channel = CustomerChatChannel(client, chat, messages_interval=100)
        channel.open()
        await settle()

        sent = await channel.send("Where is my parcel?")
        await settle()

        assert sent is True
        chat.send_user_message.assert_called_once_with("Where is my parcel?")
        assert chat.get_user_messages.call_count == 2
        assert channel.input == ""
        client.close()

    @pytest.mark.asyncio
    async def test_blank_message_is_not_sent(self):
        client = QueryClient()
        chat = make_chat_ops()
        channel = CustomerChatChannel(client, chat)

        assert await channel.send("\n  ") is False
        chat.send_user_message.assert_not_called()
        client.close()

    @pytest.mark.asyncio
    async def test_network_failure_shows_toast(self):
        client = QueryClient()
        chat = make_chat_ops()
        chat.send_user_message.side_effect = TransportError("Request failed")
        notifier = Notifier()
        channel = CustomerChatChannel(client, chat, notifier=notifier)

        assert await channel.send("hello") is False

        assert notifier.last.title == "Error sending message"
        assert channel.input == "hello"
        client.close()

    @pytest.mark.asyncio
    async def test_rejected_token_minimizes_and_redirects(self):
        client = QueryClient()
        sessions = create_sessions(customer_token="expired")
        chat = make_chat_ops()
        chat.send_user_message.side_effect = UnauthorizedError(session=sessions.customer)
        notifier = Notifier()
        channel = CustomerChatChannel(client, chat, notifier=notifier, messages_interval=60)
        channel.open()
        await settle()

        assert await channel.send("hello") is False

        assert channel.redirect_to == "/login"
        assert channel.state == ChatWidgetState.MINIMIZED
        assert not channel.messages_subscription.enabled
        assert sessions.customer.token is None
        assert notifier.last.title == "Session expired"
        client.close()
