from __future__ import annotations

"""Frame envelope definitions exchanged over the realtime connection."""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Optional


class FrameKind(IntEnum):
    """Envelope type tag; values match the wire enum."""

    UNKNOWN = 0
    REQUEST = 1
    RESPONSE = 2


@dataclass(slots=True)
class RequestPayload:
    """A request pushed to us by the server (verb is the HTTP-style method)."""

    verb: Optional[str] = None
    path: Optional[str] = None
    body: Optional[bytes] = None
    headers: tuple[str, ...] = ()
    id: Optional[int] = None


@dataclass(slots=True)
class ResponsePayload:
    """A response correlated to a request through ``id``."""

    id: Optional[int] = None
    status: Optional[int] = None
    message: Optional[str] = None
    headers: tuple[str, ...] = ()
    body: Optional[bytes] = None


@dataclass(slots=True)
class FrameEnvelope:
    """One decoded unit exchanged over the realtime connection."""

    kind: Optional[FrameKind] = None
    request: Optional[RequestPayload] = None
    response: Optional[ResponsePayload] = None

    @classmethod
    def for_response(cls, response: ResponsePayload) -> FrameEnvelope:
        return cls(kind=FrameKind.RESPONSE, response=response)

    @classmethod
    def for_request(cls, request: RequestPayload) -> FrameEnvelope:
        return cls(kind=FrameKind.REQUEST, request=request)


__all__ = ["FrameKind", "RequestPayload", "ResponsePayload", "FrameEnvelope"]
