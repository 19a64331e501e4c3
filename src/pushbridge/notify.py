from __future__ import annotations

"""Outbound webhook notification."""

import asyncio
import logging
from typing import Mapping, Optional, Protocol

import httpx

from .config import validate_endpoint_url

logger = logging.getLogger(__name__)

NOTIFICATION_HEADERS: Mapping[str, str] = {"Content-Type": "application/json"}
NOTIFICATION_BODY = b'{"type":"request"}'


class NotificationSender(Protocol):
    """Performs the actual POST; raises on any failure."""

    async def post(self, url: str, *, headers: Mapping[str, str], content: bytes) -> None:
        ...


class HttpxSender:
    """
    :class:`NotificationSender` over httpx.

    A fresh client is opened per call; notifications are rare enough that
    pooling buys nothing. Non-2xx responses raise ``httpx.HTTPStatusError``.
    """

    def __init__(
        self,
        timeout_s: float = 10.0,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._timeout_s = timeout_s
        self._transport = transport

    async def post(self, url: str, *, headers: Mapping[str, str], content: bytes) -> None:
        async with httpx.AsyncClient(timeout=self._timeout_s, transport=self._transport) as client:
            response = await client.post(url, headers=dict(headers), content=content)
            response.raise_for_status()


class NotificationDispatcher:
    """
    Best-effort signal to one webhook.

    The body never carries message content: the receiver is expected to
    wake its client, which then fetches from the server itself.
    """

    def __init__(
        self,
        webhook_url: str,
        sender: Optional[NotificationSender] = None,
        *,
        timeout_s: float = 10.0,
    ) -> None:
        self.webhook_url = validate_endpoint_url(webhook_url)
        self._sender = sender if sender is not None else HttpxSender(timeout_s)
        self._timeout_s = timeout_s

    async def dispatch(self) -> bool:
        """Send one notification; return whether it succeeded. Never raises."""
        try:
            await asyncio.wait_for(
                self._sender.post(
                    self.webhook_url,
                    headers=NOTIFICATION_HEADERS,
                    content=NOTIFICATION_BODY,
                ),
                timeout=self._timeout_s,
            )
        except asyncio.TimeoutError:
            logger.warning("Notification to %s timed out after %.1fs", self.webhook_url, self._timeout_s)
            return False
        except Exception as exc:
            logger.warning("Notification to %s failed: %s", self.webhook_url, exc)
            return False
        logger.info("Notified %s", self.webhook_url)
        return True


__all__ = [
    "NOTIFICATION_HEADERS",
    "NOTIFICATION_BODY",
    "NotificationSender",
    "HttpxSender",
    "NotificationDispatcher",
]
