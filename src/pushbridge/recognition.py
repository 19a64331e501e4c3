from __future__ import annotations

"""Request classification and acknowledgement policy."""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from .envelopes import RequestPayload, ResponsePayload

SERVER_DELIVERED_TIMESTAMP_HEADER = "X-Signal-Timestamp"

MESSAGE_PATH = "/api/v1/message"
QUEUE_EMPTY_PATH = "/api/v1/queue/empty"


class RequestKind(Enum):
    MESSAGE = "message"          # a new envelope is waiting to be fetched
    QUEUE_EMPTY = "queue_empty"  # server drained its backlog
    UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class Recognition:
    """
    Outcome of recognizing a request.

    ``timestamp`` is the server-delivered timestamp header of a MESSAGE
    request, if present. Nothing acts on it yet; callers may use it
    (e.g. for staleness filtering).
    """

    kind: RequestKind
    timestamp: Optional[str] = None

    @property
    def deliverable(self) -> bool:
        return self.kind is RequestKind.MESSAGE


def find_header(
    headers: Iterable[str], name: str = SERVER_DELIVERED_TIMESTAMP_HEADER
) -> Optional[str]:
    """
    Return the value of the first ``"Name: value"`` entry matching ``name``.

    The name match is case-insensitive and ignores surrounding whitespace.
    Only the first ``:`` separates name from value; the value is returned
    trimmed and lower-cased. Returns ``None`` when nothing matches.
    """
    wanted = name.lower()
    for header in headers:
        header_name, sep, value = header.partition(":")
        if sep and header_name.strip().lower() == wanted:
            return value.strip().lower()
    return None


def _matches(request: RequestPayload, verb: str, path: str) -> bool:
    if request.verb is None or request.path is None:
        return False
    return request.verb == verb and request.path == path


def is_message_request(request: RequestPayload) -> bool:
    return _matches(request, "PUT", MESSAGE_PATH)


def is_queue_empty_request(request: RequestPayload) -> bool:
    return _matches(request, "PUT", QUEUE_EMPTY_PATH)


def recognize(request: RequestPayload) -> Recognition:
    """Classify ``request``; matching is exact, with no normalization."""
    if is_message_request(request):
        return Recognition(RequestKind.MESSAGE, find_header(request.headers))
    if is_queue_empty_request(request):
        return Recognition(RequestKind.QUEUE_EMPTY)
    return Recognition(RequestKind.UNKNOWN)


def build_acknowledgement(request: RequestPayload, recognition: Recognition) -> ResponsePayload:
    """Build the response echoing ``request.id``: 200 for messages, 400 otherwise."""
    if recognition.deliverable:
        return ResponsePayload(id=request.id, status=200, message="OK")
    return ResponsePayload(id=request.id, status=400, message="Unknown")


__all__ = [
    "SERVER_DELIVERED_TIMESTAMP_HEADER",
    "RequestKind",
    "Recognition",
    "find_header",
    "is_message_request",
    "is_queue_empty_request",
    "recognize",
    "build_acknowledgement",
]
