from __future__ import annotations

"""Run one realtime bridge per registered connection."""

import asyncio
import logging
from typing import Any, Callable, List, Optional, Sequence

from sqlalchemy.orm import Session

from .bridge import NotificationBridge
from .config import AppSettings
from .notify import NotificationDispatcher, NotificationSender
from .registry import ConnectionInfo, build_websocket_url, create_registry_engine, list_connections
from .transports.websocket import WebSocketChannel

logger = logging.getLogger(__name__)

ChannelFactory = Callable[[NotificationBridge], Any]


def build_bridge(
    settings: AppSettings,
    info: ConnectionInfo,
    sender: Optional[NotificationSender] = None,
) -> NotificationBridge:
    """Wire a bridge for ``info``; raises ConfigError on malformed URLs."""
    dispatcher = NotificationDispatcher(
        info.endpoint,
        sender,
        timeout_s=settings.notify.timeout_s,
    )
    return NotificationBridge(
        build_websocket_url(settings.signal.websocket_url, info),
        dispatcher,
        detach_notifications=settings.notify.detach,
    )


async def run_connections(
    settings: AppSettings,
    infos: Sequence[ConnectionInfo],
    channel_factory: Optional[ChannelFactory] = None,
) -> List[Any]:
    """
    Run every connection as an independent task until all of them end.

    Bridges are built up front, so a malformed URL aborts before any
    socket is opened. One connection ending or failing does not affect
    the others. Returns the per-connection results (exceptions included).
    """
    def websocket_channel(bridge: NotificationBridge) -> WebSocketChannel:
        return WebSocketChannel(bridge, open_timeout_s=settings.signal.open_timeout_s)

    factory = channel_factory or websocket_channel
    channels = [factory(build_bridge(settings, info)) for info in infos]
    results = await asyncio.gather(*(ch.run() for ch in channels), return_exceptions=True)
    for info, result in zip(infos, results):
        if isinstance(result, BaseException):
            logger.error("Connection %s ended with error: %r", info.uuid, result)
        else:
            logger.info("Connection %s ended", info.uuid)
    return list(results)


def serve(settings: AppSettings) -> None:
    """Load all registered connections and run them."""
    engine = create_registry_engine(settings.database)
    with Session(engine) as session:
        infos = list_connections(session)
    if not infos:
        logger.warning("No connections registered; nothing to serve")
        return
    logger.info("Starting %d connection(s)", len(infos))
    asyncio.run(run_connections(settings, infos))
