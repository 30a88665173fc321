"""Parsing helpers for chat responses."""

import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from application.models.response_models import ChatMessage, ChatUser

logger = logging.getLogger(__name__)


def _envelope_items(response: Optional[Dict[str, Any]]) -> List[Any]:
    if not response:
        return []
    data = response.get("data") if isinstance(response, dict) else response
    return data if isinstance(data, list) else []


def parse_messages(response: Optional[Dict[str, Any]]) -> List[ChatMessage]:
    """Return messages in server order, dropping repeated ids.

    The first occurrence of an id wins. Rows that do not validate are
    skipped and logged.
    """
    messages: List[ChatMessage] = []
    seen = set()
    for item in _envelope_items(response):
        try:
            message = ChatMessage.model_validate(item)
        except ValidationError as e:
            logger.warning(f"Skipping malformed chat message: {e}")
            continue
        if message.id in seen:
            logger.debug(f"Dropping duplicate chat message {message.id}")
            continue
        seen.add(message.id)
        messages.append(message)
    return messages


def parse_users(response: Optional[Dict[str, Any]]) -> List[ChatUser]:
    users = []
    for item in _envelope_items(response):
        try:
            users.append(ChatUser.model_validate(item))
        except ValidationError as e:
            logger.warning(f"Skipping malformed chat user: {e}")
    return users


def filter_users(users: List[ChatUser], search: str) -> List[ChatUser]:
    """Case-insensitive match on name or email."""
    needle = (search or "").lower()
    if not needle:
        return list(users)
    return [
        user
        for user in users
        if needle in user.name.lower() or needle in (user.email or "").lower()
    ]
