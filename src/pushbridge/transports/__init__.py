from __future__ import annotations

"""Transport implementations for pushbridge."""

from .base import Connection, SendHandle
from .codec import FrameDecodeError, decode_frame, encode_frame
from .websocket import QueueSendHandle, WebSocketChannel

__all__ = [
    "Connection",
    "SendHandle",
    "FrameDecodeError",
    "decode_frame",
    "encode_frame",
    "QueueSendHandle",
    "WebSocketChannel",
]
