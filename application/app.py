import sys
from pathlib import Path

# Load environment variables FIRST, before any other imports
from dotenv import load_dotenv
load_dotenv()

# Add project root to path (for IDE compatibility when running directly)
project_root = Path(__file__).parent.parent.resolve()
project_root_str = str(project_root)
if sys.path and Path(sys.path[0]).name == "application":
    sys.path[0] = project_root_str
elif project_root_str not in sys.path:
    sys.path.insert(0, project_root_str)

import asyncio
import getpass
import logging
from typing import Optional

from application.models.request_models import LoginCredentials
from application.services.notifier import Toast
from application.services.portal_service import PortalService
from common.config.config import APP_DEBUG, APP_LOG_FILE
from common.exception.exceptions import PortalError

# Configure root logging to both stdout and a file for debugging/triage.
log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logging.basicConfig(
    level=logging.DEBUG if APP_DEBUG else logging.INFO,
    format=log_format,
    handlers=[
        logging.StreamHandler(sys.stdout),
        logging.FileHandler(APP_LOG_FILE, mode="a"),
    ],
)

logger = logging.getLogger(__name__)

HELP = """Commands:
  /open           open the chat widget
  /min            minimize it (stops polling)
  /users          list conversations (admin)
  /search <text>  filter conversations by name or email (admin)
  /select <id>    open a conversation (admin)
  /back           back to the conversation list (admin)
  /quit           exit
Anything else is sent as a message."""


def _print_toast(toast: Toast) -> None:
    print(f"[{toast.variant}] {toast.title}: {toast.description}")


async def _ainput(prompt: str) -> str:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, input, prompt)


async def _agetpass(prompt: str) -> str:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, getpass.getpass, prompt)


async def _ensure_login(portal: PortalService, admin: bool) -> bool:
    guard = portal.admin_guard if admin else portal.customer_guard
    await guard.check()
    if guard.redirect_to is None:
        return True

    print(f"Login required ({guard.redirect_to})")
    email = await _ainput("Email: ")
    password = await _agetpass("Password: ")
    credentials = LoginCredentials(email=email, password=password)
    try:
        if admin:
            await portal.auth.admin_login(credentials)
        else:
            await portal.auth.login(credentials)
    except PortalError as e:
        portal.notifier.error(e, title="Login failed", fallback="Invalid credentials")
        return False
    return True


async def run_chat(mode: str = "customer", portal: Optional[PortalService] = None) -> None:
    """Drive a chat widget from the terminal until ``/quit``."""
    admin = mode == "admin"
    portal = portal or PortalService()
    portal.notifier.add_listener(_print_toast)

    if not await _ensure_login(portal, admin):
        portal.close()
        return

    channel = portal.admin_chat() if admin else portal.customer_chat()
    printed = set()

    def show_messages(_state) -> None:
        for message in channel.messages:
            if message.id in printed:
                continue
            printed.add(message.id)
            print(f"{message.sender_name or message.sender_type}: {message.message}")

    channel.on_messages(show_messages)
    channel.open()
    print(HELP)

    try:
        while True:
            line = (await _ainput("> ")).strip()
            if not line:
                continue
            if line == "/quit":
                break
            if line == "/open":
                channel.open()
            elif line == "/min":
                channel.minimize()
            elif admin and line == "/users":
                for user in channel.users:
                    print(f"{user.id}: {user.name} <{user.email}> unread={user.unread_count}")
            elif admin and line.startswith("/search"):
                channel.search = line[len("/search"):].strip()
            elif admin and line.startswith("/select "):
                try:
                    channel.select(int(line.split(maxsplit=1)[1]))
                except (ValueError, RuntimeError) as e:
                    print(e)
                printed.clear()
            elif admin and line == "/back":
                channel.back()
            elif line.startswith("/"):
                print(HELP)
            elif not await channel.send(line):
                print("Nothing sent")
    finally:
        channel.close()
        portal.close()
