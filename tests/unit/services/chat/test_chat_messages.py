"""Tests for chat parsing helpers and the widget state machine."""

import pytest

from application.models.response_models import ChatUser
from application.services.chat import (
    ChatWidget,
    ChatWidgetState,
    filter_users,
    parse_messages,
    parse_users,
)
from tests.fixtures.portal_fixtures import create_chat_message, create_chat_user, envelope


class TestParseMessages:
    def test_keeps_server_order(self):
        response = envelope(
            [create_chat_message(3, "c"), create_chat_message(1, "a"), create_chat_message(2, "b")]
        )

        assert [m.id for m in parse_messages(response)] == [3, 1, 2]

    def test_duplicate_ids_keep_first_occurrence(self):
        response = envelope(
            [
                create_chat_message(1, "first"),
                create_chat_message(2, "second"),
                create_chat_message(1, "first again"),
            ]
        )

        messages = parse_messages(response)

        assert [m.message for m in messages] == ["first", "second"]

    def test_malformed_rows_are_skipped(self):
        response = envelope([{"id": 1}, create_chat_message(2, "ok")])

        assert [m.id for m in parse_messages(response)] == [2]

    @pytest.mark.parametrize("response", [None, {}, envelope(None), envelope({"id": 1})])
    def test_missing_data_is_empty(self, response):
        assert parse_messages(response) == []


class TestUsers:
    def test_parse_and_filter(self):
        users = parse_users(
            envelope([create_chat_user(1, "Alice", "alice@x.io"), create_chat_user(2, "Bob", "bob@y.io")])
        )

        assert [u.id for u in filter_users(users, "")] == [1, 2]
        assert [u.id for u in filter_users(users, "BOB")] == [2]
        assert [u.id for u in filter_users(users, "x.io")] == [1]
        assert filter_users(users, "zed") == []

    def test_filter_tolerates_missing_email(self):
        users = [ChatUser(id=1, name="Alice")]

        assert filter_users(users, "ali") == users


class TestChatWidget:
    def test_transitions(self):
        widget = ChatWidget()
        assert widget.state == ChatWidgetState.MINIMIZED

        widget.open()
        assert widget.state == ChatWidgetState.OPEN

        widget.select(7)
        assert widget.state == ChatWidgetState.SELECTED
        assert widget.selected_id == 7

        widget.back()
        assert widget.state == ChatWidgetState.OPEN
        assert widget.selected_id is None

        widget.select(8)
        widget.minimize()
        assert widget.state == ChatWidgetState.MINIMIZED
        assert widget.selected_id is None

    def test_listener_fires_once_per_transition(self):
        widget = ChatWidget()
        states = []
        widget.add_listener(lambda w: states.append(w.state))

        widget.open()
        widget.open()
        widget.select(7)
        widget.select(7)
        widget.minimize()
        widget.back()

        assert states == [
            ChatWidgetState.OPEN,
            ChatWidgetState.SELECTED,
            ChatWidgetState.MINIMIZED,
        ]

    def test_cannot_select_while_minimized(self):
        with pytest.raises(RuntimeError):
            ChatWidget().select(1)
