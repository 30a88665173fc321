"""
Unit tests for session contexts and token storage.
"""

import json

import pytest

from common.auth.session import (
    FileTokenStorage,
    MemoryTokenStorage,
    PortalSessions,
    is_admin_path,
)
from common.constants import ADMIN_TOKEN_KEY, ADMIN_USER_KEY, CUSTOMER_TOKEN_KEY, CUSTOMER_USER_KEY


class TestSessionContext:
    """Test the two named session namespaces."""

    def test_namespaces_use_distinct_storage_slots(self):
        """Customer and admin tokens never overwrite each other."""
        storage = MemoryTokenStorage()
        sessions = PortalSessions.from_storage(storage)

        sessions.customer.start("cust-token", {"id": 1, "name": "Alice"})
        sessions.admin.start("admin-token", {"id": 3, "name": "Admin"})

        assert storage.get(CUSTOMER_TOKEN_KEY) == "cust-token"
        assert storage.get(ADMIN_TOKEN_KEY) == "admin-token"
        assert json.loads(storage.get(CUSTOMER_USER_KEY))["name"] == "Alice"
        assert json.loads(storage.get(ADMIN_USER_KEY))["name"] == "Admin"

    def test_clear_only_affects_own_namespace(self):
        """Clearing the admin session leaves the customer session intact."""
        sessions = PortalSessions.from_storage(MemoryTokenStorage())
        sessions.customer.start("cust-token")
        sessions.admin.start("admin-token", {"id": 3})

        sessions.admin.clear()

        assert sessions.admin.token is None
        assert sessions.admin.user is None
        assert sessions.customer.token == "cust-token"

    def test_malformed_cached_user_is_ignored(self):
        """A corrupted user slot reads as no user."""
        storage = MemoryTokenStorage({CUSTOMER_USER_KEY: "{not json"})
        sessions = PortalSessions.from_storage(storage)

        assert sessions.customer.user is None

    def test_login_routes(self):
        sessions = PortalSessions.from_storage(MemoryTokenStorage())

        assert sessions.customer.login_route == "/login"
        assert sessions.admin.login_route == "/admin/login"


class TestAdminPathSelection:
    """Test which session authenticates a request path."""

    @pytest.mark.parametrize(
        "path,expected",
        [
            ("/admin", True),
            ("/admin/clients", True),
            ("admin/chat/users", True),
            ("/admin?page=2", True),
            ("/administrator", False),
            ("/auth/verify", False),
            ("/buy-for-me-requests/5/status", False),
        ],
    )
    def test_is_admin_path(self, path, expected):
        assert is_admin_path(path) is expected

    def test_for_path_selects_session(self):
        sessions = PortalSessions.from_storage(MemoryTokenStorage())

        assert sessions.for_path("/admin/stats") is sessions.admin
        assert sessions.for_path("/packages") is sessions.customer


class TestFileTokenStorage:
    """Test the JSON file store."""

    def test_persists_across_instances(self, tmp_path):
        """A token written by one instance is visible to a new one."""
        path = tmp_path / "session.json"
        FileTokenStorage(str(path)).set(CUSTOMER_TOKEN_KEY, "abc")

        assert FileTokenStorage(str(path)).get(CUSTOMER_TOKEN_KEY) == "abc"

    def test_remove(self, tmp_path):
        path = tmp_path / "session.json"
        storage = FileTokenStorage(str(path))
        storage.set(ADMIN_TOKEN_KEY, "xyz")

        storage.remove(ADMIN_TOKEN_KEY)

        assert storage.get(ADMIN_TOKEN_KEY) is None

    def test_missing_file_reads_empty(self, tmp_path):
        storage = FileTokenStorage(str(tmp_path / "nested" / "missing.json"))

        assert storage.get(CUSTOMER_TOKEN_KEY) is None

    def test_corrupted_file_reads_empty(self, tmp_path):
        path = tmp_path / "session.json"
        path.write_text("not json")

        assert FileTokenStorage(str(path)).get(CUSTOMER_TOKEN_KEY) is None
