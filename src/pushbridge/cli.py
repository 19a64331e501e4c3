"""
Command-line entry point.

    pushbridge [-c FILE] [-d] server
    pushbridge connection add UUID DEVICE_ID PASSWORD ENDPOINT
    pushbridge connection remove UUID
    pushbridge connection list
    pushbridge test account UUID DEVICE_ID PASSWORD
    pushbridge test endpoint ENDPOINT
"""

import argparse
import asyncio
import logging
import sys
from typing import Any, Callable, Optional, Sequence

import websockets
from sqlalchemy.orm import Session
from websockets.exceptions import WebSocketException

from . import __version__
from .config import AppSettings, ConfigError, get_settings
from .notify import NotificationDispatcher
from .registry import (
    ConnectionInfo,
    RegistryError,
    add_connection,
    build_websocket_url,
    create_registry_engine,
    list_connections,
    remove_connection,
)
from .server import serve

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pushbridge",
        description="Relay new-message notifications to push webhooks.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-c", "--config", metavar="FILE", help="Sets a custom config (env) file")
    parser.add_argument("-d", "--debug", action="store_true", help="Turn debugging information on")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("server", help="Run websockets for all registered connections")

    connection = commands.add_parser("connection", help="Add, remove and list connections")
    connection_commands = connection.add_subparsers(dest="action", required=True)
    add = connection_commands.add_parser("add", help="Register a connection")
    add.add_argument("uuid")
    add.add_argument("device_id", type=int)
    add.add_argument("password")
    add.add_argument("endpoint")
    remove = connection_commands.add_parser("remove", help="Remove a connection")
    remove.add_argument("uuid")
    connection_commands.add_parser("list", help="List registered connections")

    test = commands.add_parser("test", help="Test account and endpoint validity")
    test_commands = test.add_subparsers(dest="action", required=True)
    account = test_commands.add_parser("account", help="Check account credentials")
    account.add_argument("uuid")
    account.add_argument("device_id", type=int)
    account.add_argument("password")
    endpoint = test_commands.add_parser("endpoint", help="Send a test notification")
    endpoint.add_argument("endpoint")

    return parser


def configure_logging(settings: AppSettings, debug: bool) -> None:
    level = "DEBUG" if debug or settings.debug else settings.logging.level
    logging.basicConfig(level=level, format=settings.logging.format)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def run_connection(settings: AppSettings, args: argparse.Namespace) -> int:
    engine = create_registry_engine(settings.database)
    with Session(engine) as session, session.begin():
        if args.action == "add":
            info = add_connection(
                session,
                args.uuid,
                args.device_id,
                args.password,
                args.endpoint,
                allowed_endpoints=settings.notify.allowed_endpoints,
            )
            print(f"Connection {info.uuid} added")
        elif args.action == "remove":
            remove_connection(session, args.uuid)
            print(f"Connection {args.uuid} removed")
        else:
            for info in list_connections(session):
                print(f"{info.uuid}\t{info.device_id}\t{info.endpoint}")
    return 0


async def check_account(
    url: str,
    open_timeout_s: float,
    connect: Callable[..., Any] = websockets.connect,
) -> Optional[str]:
    """Open and close the websocket at ``url``; return an error description or None."""
    try:
        async with connect(url, open_timeout=open_timeout_s):
            pass
    except (WebSocketException, OSError, asyncio.TimeoutError) as exc:
        return f"{type(exc).__name__}: {exc}"
    return None


def run_test(settings: AppSettings, args: argparse.Namespace) -> int:
    if args.action == "account":
        info = ConnectionInfo(args.uuid, args.device_id, args.password, endpoint="")
        url = build_websocket_url(settings.signal.websocket_url, info)
        error = asyncio.run(check_account(url, settings.signal.open_timeout_s))
        if error is not None:
            print(f"Account {args.uuid} is not valid: {error}")
            return 1
        print(f"Account {args.uuid} is valid")
        return 0

    if not settings.notify.is_allowed(args.endpoint):
        print(f"Endpoint {args.endpoint} is not allowed")
        return 1
    dispatcher = NotificationDispatcher(args.endpoint, timeout_s=settings.notify.timeout_s)
    if asyncio.run(dispatcher.dispatch()):
        print(f"Endpoint {args.endpoint} accepted the notification")
        return 0
    print(f"Endpoint {args.endpoint} did not accept the notification")
    return 1


def main(argv: Optional[Sequence[str]] = None, settings: Optional[AppSettings] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        if settings is None:
            settings = get_settings(_env_file=args.config) if args.config else get_settings()
        configure_logging(settings, args.debug)

        if args.command == "server":
            serve(settings)
            return 0
        if args.command == "connection":
            return run_connection(settings, args)
        return run_test(settings, args)
    except (ConfigError, RegistryError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
