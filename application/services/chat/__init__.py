"""Polling support chat for admins and customers."""

from application.services.chat.admin_channel import AdminChatChannel
from application.services.chat.customer_channel import CustomerChatChannel
from application.services.chat.messages import filter_users, parse_messages, parse_users
from application.services.chat.widget import ChatWidget, ChatWidgetState

__all__ = [
    "AdminChatChannel",
    "ChatWidget",
    "ChatWidgetState",
    "CustomerChatChannel",
    "filter_users",
    "parse_messages",
    "parse_users",
]
