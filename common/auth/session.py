"""
Session context for the portal client.

The customer and admin areas keep independent sessions. Each session is a
``SessionContext`` bound to a pair of storage slots (token and cached user
profile) in a durable ``TokenStorage``. The HTTP client receives both
contexts explicitly and picks one per request path.
"""

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from common.config.config import TOKEN_STORAGE_PATH
from common.constants import (
    ADMIN_LOGIN_ROUTE,
    ADMIN_PATH_PREFIX,
    ADMIN_TOKEN_KEY,
    ADMIN_USER_KEY,
    CUSTOMER_LOGIN_ROUTE,
    CUSTOMER_TOKEN_KEY,
    CUSTOMER_USER_KEY,
)

logger = logging.getLogger(__name__)


class TokenStorage(ABC):
    """Key/value string storage that survives restarts."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        pass


class MemoryTokenStorage(TokenStorage):
    """Process-local storage, used in tests and short-lived scripts."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._values: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def remove(self, key: str) -> None:
        self._values.pop(key, None)


class FileTokenStorage(TokenStorage):
    """JSON file storage.

    The file is re-read on every access so that several processes sharing
    the same file observe each other's logins and logouts.
    """

    def __init__(self, path: Optional[str] = None):
        self.path = Path(path or TOKEN_STORAGE_PATH).expanduser()

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable token storage {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _save(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # Write to a sibling temp file and rename so readers never see a partial file
        fd, tmp_path = tempfile.mkstemp(dir=str(self.path.parent), suffix=".tmp")
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f)
        os.replace(tmp_path, self.path)

    def get(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def remove(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)


class SessionContext:
    """One authenticated area of the portal (customer or admin)."""

    def __init__(
        self,
        name: str,
        storage: TokenStorage,
        token_key: str,
        user_key: str,
        login_route: str,
    ):
        """Initialize a session context.

        Args:
            name: Namespace name ("customer" or "admin")
            storage: Durable storage shared by all sessions
            token_key: Storage slot for the bearer token
            user_key: Storage slot for the cached user profile (JSON)
            login_route: Client route to redirect to when unauthenticated
        """
        self.name = name
        self.storage = storage
        self.token_key = token_key
        self.user_key = user_key
        self.login_route = login_route

    @property
    def token(self) -> Optional[str]:
        return self.storage.get(self.token_key) or None

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    @property
    def user(self) -> Optional[Dict[str, Any]]:
        raw = self.storage.get(self.user_key)
        if not raw:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"Discarding malformed cached user for {self.name} session")
            return None

    def start(self, token: str, user: Optional[Dict[str, Any]] = None) -> None:
        """Persist a freshly issued token and the user it belongs to."""
        self.storage.set(self.token_key, token)
        if user is not None:
            self.storage.set(self.user_key, json.dumps(user))
        logger.info(f"Started {self.name} session")

    def update_user(self, user: Dict[str, Any]) -> None:
        self.storage.set(self.user_key, json.dumps(user))

    def clear(self) -> None:
        """Forget the token and the cached user."""
        self.storage.remove(self.token_key)
        self.storage.remove(self.user_key)
        logger.info(f"Cleared {self.name} session")

    def __repr__(self) -> str:
        return f"SessionContext(name={self.name!r}, authenticated={self.is_authenticated})"


def customer_session(storage: TokenStorage) -> SessionContext:
    return SessionContext(
        name="customer",
        storage=storage,
        token_key=CUSTOMER_TOKEN_KEY,
        user_key=CUSTOMER_USER_KEY,
        login_route=CUSTOMER_LOGIN_ROUTE,
    )


def admin_session(storage: TokenStorage) -> SessionContext:
    return SessionContext(
        name="admin",
        storage=storage,
        token_key=ADMIN_TOKEN_KEY,
        user_key=ADMIN_USER_KEY,
        login_route=ADMIN_LOGIN_ROUTE,
    )


@dataclass
class PortalSessions:
    """The two named session contexts of the portal."""

    customer: SessionContext
    admin: SessionContext

    @classmethod
    def from_storage(cls, storage: TokenStorage) -> "PortalSessions":
        return cls(customer=customer_session(storage), admin=admin_session(storage))

    def for_path(self, path: str) -> SessionContext:
        """Select the session whose token authenticates requests to ``path``."""
        if is_admin_path(path):
            return self.admin
        return self.customer


def is_admin_path(path: str) -> bool:
    """True for ``/admin`` and anything below it."""
    path = "/" + path.lstrip("/")
    return path == ADMIN_PATH_PREFIX or path.startswith(ADMIN_PATH_PREFIX + "/") or path.startswith(
        ADMIN_PATH_PREFIX + "?"
    )
