from __future__ import annotations

"""Websocket transport driving a :class:`~pushbridge.transports.base.Connection`."""

import asyncio
import logging
from typing import Any, Callable, Optional

import websockets
from websockets.exceptions import ConnectionClosed

from ..envelopes import FrameEnvelope
from .base import Connection
from .codec import FrameDecodeError, decode_frame, encode_frame

logger = logging.getLogger(__name__)


class QueueSendHandle:
    """
    Send handle backed by an unbounded asyncio queue.

    Frames are encoded at submission time and drained by a single sender
    task, so they leave the socket in the order they were submitted.
    """

    def __init__(self, queue: "asyncio.Queue[Optional[bytes]]") -> None:
        self._queue = queue
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, envelope: FrameEnvelope) -> None:
        if self._closed:
            logger.warning("Dropping outbound frame: send handle is closed")
            return
        self._queue.put_nowait(encode_frame(envelope))

    def close(self) -> None:
        """Stop accepting frames and wake the sender after the queued ones."""
        if not self._closed:
            self._closed = True
            self._queue.put_nowait(None)


class WebSocketChannel:
    """
    One realtime connection for one :class:`Connection` handler.

    Reconnecting is left to the caller; :meth:`run` returns once the
    socket closes.
    """

    def __init__(
        self,
        connection: Connection,
        *,
        open_timeout_s: float = 10.0,
        connect: Callable[..., Any] = websockets.connect,
    ) -> None:
        self._connection = connection
        self._open_timeout_s = open_timeout_s
        self._connect = connect

    async def run(self) -> None:
        address = self._connection.get_address()
        logger.info("Opening websocket to %s", _redact(address))
        async with self._connect(address, open_timeout=self._open_timeout_s) as ws:
            await self.serve(ws)
        logger.info("Websocket to %s closed", _redact(address))

    async def serve(self, ws: Any) -> None:
        """Pump frames between an open websocket and the handler until it closes."""
        queue: asyncio.Queue[Optional[bytes]] = asyncio.Queue()
        handle = QueueSendHandle(queue)
        self._connection.set_send_handle(handle)
        sender = asyncio.create_task(self._drain(ws, queue))
        try:
            async for raw in ws:
                if isinstance(raw, str):
                    logger.debug("Ignoring text frame of %d chars", len(raw))
                    continue
                try:
                    envelope = decode_frame(raw)
                except FrameDecodeError as exc:
                    logger.warning("Skipping undecodable frame: %s", exc)
                    continue
                await self._connection.on_message(envelope)
        finally:
            self._connection.set_send_handle(None)
            handle.close()
            await sender

    @staticmethod
    async def _drain(ws: Any, queue: "asyncio.Queue[Optional[bytes]]") -> None:
        while True:
            data = await queue.get()
            if data is None:
                return
            try:
                await ws.send(data)
            except ConnectionClosed:
                logger.debug("Websocket closed while sending; dropping queued frames")
                return


def _redact(address: str) -> str:
    """Strip the query string, which carries credentials."""
    return address.split("?", 1)[0]


__all__ = ["QueueSendHandle", "WebSocketChannel"]
