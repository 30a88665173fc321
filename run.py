#!/usr/bin/env python3
"""
Entry point script to run the portal chat client in a terminal.

This script should be run from the project root directory:
    python run.py            # customer support chat
    python run.py admin      # admin chat console

Environment variables:
    API_BASE_URL: Portal API root (default: http://127.0.0.1:8000/api)
    TOKEN_STORAGE_PATH: Session file (default: ~/.parcel_portal/session.json)
    APP_DEBUG: Enable debug logging (default: false)
    APP_LOG_FILE: Log file (default: portal-client.log)
"""
import asyncio
import sys

if __name__ == "__main__":
    from application.app import run_chat

    mode = sys.argv[1] if len(sys.argv) > 1 else "customer"
    if mode not in ("customer", "admin"):
        print("Usage: python run.py [customer|admin]")
        sys.exit(2)

    print(f"Starting portal {mode} chat")
    try:
        asyncio.run(run_chat(mode))
    except KeyboardInterrupt:
        pass
