from __future__ import annotations

"""
Frame handler relaying new-message requests to a push webhook.

For every inbound frame:

- responses, and frames without a kind, are ignored;
- requests lacking a verb or a path are dropped unanswered;
- every other request is recognized, acknowledged on the same channel
  (200 "OK" for new-message requests, 400 "Unknown" otherwise) and, for
  new-message requests only, followed by one webhook notification.

The handler keeps no per-frame state; the only mutable attribute is the
send handle installed by the transport.
"""

import asyncio
import logging
from typing import Optional, Set

from .config import validate_websocket_url
from .envelopes import FrameEnvelope, FrameKind, RequestPayload, ResponsePayload
from .notify import NotificationDispatcher
from .recognition import Recognition, RequestKind, build_acknowledgement, recognize
from .transports.base import Connection, SendHandle

logger = logging.getLogger(__name__)


class NotificationBridge(Connection):
    """
    :class:`~pushbridge.transports.base.Connection` for one account.

    Parameters
    ----------
    address:
        Websocket URL of the realtime endpoint. Malformed URLs raise
        :class:`~pushbridge.config.ConfigError`.
    dispatcher:
        Notification dispatcher bound to the account's webhook.
    detach_notifications:
        When true, webhook calls run as background tasks so a slow
        webhook does not delay acknowledgement of later frames.
    """

    def __init__(
        self,
        address: str,
        dispatcher: NotificationDispatcher,
        *,
        detach_notifications: bool = False,
    ) -> None:
        self._address = validate_websocket_url(address)
        self._dispatcher = dispatcher
        self._detach = detach_notifications
        self._send_handle: Optional[SendHandle] = None
        self._pending: Set[asyncio.Task[bool]] = set()

    # ------------------------------------------------------------------ #
    # Connection capability
    # ------------------------------------------------------------------ #

    def get_address(self) -> str:
        return self._address

    def get_send_handle(self) -> Optional[SendHandle]:
        return self._send_handle

    def set_send_handle(self, handle: Optional[SendHandle]) -> None:
        self._send_handle = handle

    async def on_message(self, envelope: FrameEnvelope) -> None:
        if envelope.kind is FrameKind.REQUEST:
            if envelope.request is not None:
                await self.on_request(envelope.request)
        elif envelope.kind is FrameKind.RESPONSE:
            # Responses to our own requests are correlated by the transport's caller.
            pass
        else:
            logger.debug("Ignoring frame with kind=%s", envelope.kind)

    # ------------------------------------------------------------------ #
    # Request handling
    # ------------------------------------------------------------------ #

    async def on_request(self, request: RequestPayload) -> Optional[Recognition]:
        """
        Acknowledge ``request`` and notify the webhook if it announces a
        new message. Returns the recognition, or ``None`` if the request
        was dropped for lacking a verb or a path.
        """
        if request.verb is None or request.path is None:
            logger.debug("Dropping request without verb/path (id=%s)", request.id)
            return None

        recognition = recognize(request)
        self._send_response(build_acknowledgement(request, recognition))

        if recognition.kind is RequestKind.QUEUE_EMPTY:
            logger.debug("Server queue drained")
        elif recognition.deliverable:
            await self._notify()
        else:
            logger.debug("Unknown request %s %s", request.verb, request.path)
        return recognition

    def _send_response(self, response: ResponsePayload) -> None:
        handle = self._send_handle
        if handle is None:
            logger.warning("No send handle; dropping acknowledgement for id=%s", response.id)
            return
        handle.send(FrameEnvelope.for_response(response))
        logger.debug("Acknowledged id=%s with %s %s", response.id, response.status, response.message)

    async def _notify(self) -> None:
        if not self._detach:
            await self._dispatcher.dispatch()
            return
        task = asyncio.create_task(self._dispatcher.dispatch())
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def wait_notifications(self) -> None:
        """Wait for detached notifications still in flight."""
        if self._pending:
            await asyncio.gather(*self._pending)


__all__ = ["NotificationBridge"]
