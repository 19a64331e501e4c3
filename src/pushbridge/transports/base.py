from __future__ import annotations

"""Capability protocols binding frame handlers to a transport."""

from typing import Optional, Protocol

from ..envelopes import FrameEnvelope


class SendHandle(Protocol):
    """Outbound half of an open channel."""

    def send(self, envelope: FrameEnvelope) -> None:
        """Queue ``envelope`` for delivery; never blocks."""


class Connection(Protocol):
    """
    Handler side of a realtime channel.

    The transport owns the socket lifecycle: it reads the target from
    :meth:`get_address`, installs a send handle on connect (and removes
    it on disconnect) and awaits :meth:`on_message` once per decoded
    inbound frame.
    """

    def get_address(self) -> str:
        """Return the websocket URL to connect to."""

    def get_send_handle(self) -> Optional[SendHandle]:
        """Return the installed send handle, if connected."""

    def set_send_handle(self, handle: Optional[SendHandle]) -> None:
        """Install (or clear, with ``None``) the send handle."""

    async def on_message(self, envelope: FrameEnvelope) -> None:
        """Handle one inbound :class:`~pushbridge.envelopes.FrameEnvelope`."""
