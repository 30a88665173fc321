"""Unit tests for Notifier."""

from application.services.notifier import DEFAULT, DESTRUCTIVE, Notifier
from common.exception.exceptions import ApiError


class TestNotifier:
    def test_notify_records_and_forwards(self):
        notifier = Notifier()
        received = []
        notifier.add_listener(received.append)

        toast = notifier.success("Success", "Address created successfully")

        assert notifier.toasts == [toast]
        assert received == [toast]
        assert toast.variant == DEFAULT

    def test_error_uses_server_message(self):
        notifier = Notifier()

        toast = notifier.error(ApiError("Code already exists", 409), fallback="Failed")

        assert toast.description == "Code already exists"
        assert toast.variant == DESTRUCTIVE

    def test_error_falls_back_for_foreign_exceptions(self):
        notifier = Notifier()

        toast = notifier.error(RuntimeError(""), title="Oops", fallback="Failed to save")

        assert toast.title == "Oops"
        assert toast.description == "Failed to save"

    def test_clear(self):
        notifier = Notifier()
        notifier.notify("a")
        notifier.clear()

        assert notifier.last is None
