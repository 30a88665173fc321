"""
Configuration module for the parcel portal client.

Values are read once from the environment (and an optional .env file)
at import time.
"""

import os

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


# API server
API_BASE_URL = os.getenv("API_BASE_URL", "http://127.0.0.1:8000/api").rstrip("/")
HTTP_TIMEOUT_SECONDS = float(os.getenv("HTTP_TIMEOUT_SECONDS", "30"))
HTTP_CONNECT_TIMEOUT_SECONDS = float(os.getenv("HTTP_CONNECT_TIMEOUT_SECONDS", "10"))

# Durable token storage (JSON file, one key per storage slot)
TOKEN_STORAGE_PATH = os.getenv(
    "TOKEN_STORAGE_PATH", os.path.expanduser("~/.parcel_portal/session.json")
)

# Query cache
QUERY_STALE_TIME_SECONDS = float(os.getenv("QUERY_STALE_TIME_SECONDS", "0"))
QUERY_GC_TIME_SECONDS = float(os.getenv("QUERY_GC_TIME_SECONDS", "300"))

# Chat polling cadence
CHAT_USERS_POLL_SECONDS = float(os.getenv("CHAT_USERS_POLL_SECONDS", "5"))
CHAT_MESSAGES_POLL_SECONDS = float(os.getenv("CHAT_MESSAGES_POLL_SECONDS", "2"))

# Admin account that receives customer chat messages
CHAT_SUPPORT_ADMIN_ID = int(os.getenv("CHAT_SUPPORT_ADMIN_ID", "3"))

# Logging
APP_LOG_FILE = os.getenv("APP_LOG_FILE", "portal-client.log")
APP_DEBUG = os.getenv("APP_DEBUG", "false").lower() == "true"
