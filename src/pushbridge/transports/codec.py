from __future__ import annotations

"""Conversion between protobuf wire messages and frame envelopes."""

from google.protobuf.message import DecodeError

from ..envelopes import FrameEnvelope, FrameKind, RequestPayload, ResponsePayload
from .proto.websocket_resources_pb2 import (
    WebSocketMessage,
    WebSocketRequestMessage,
    WebSocketResponseMessage,
)


class FrameDecodeError(ValueError):
    """Raised when inbound bytes are not a valid WebSocketMessage."""
    pass


def _optional(message, name: str):
    return getattr(message, name) if message.HasField(name) else None


def _request_from_proto(msg: WebSocketRequestMessage) -> RequestPayload:
    return RequestPayload(
        verb=_optional(msg, "verb"),
        path=_optional(msg, "path"),
        body=_optional(msg, "body"),
        headers=tuple(msg.headers),
        id=_optional(msg, "id"),
    )


def _response_from_proto(msg: WebSocketResponseMessage) -> ResponsePayload:
    return ResponsePayload(
        id=_optional(msg, "id"),
        status=_optional(msg, "status"),
        message=_optional(msg, "message"),
        headers=tuple(msg.headers),
        body=_optional(msg, "body"),
    )


def decode_frame(data: bytes) -> FrameEnvelope:
    """
    Parse one binary websocket frame.

    Unset optional fields become ``None``. A ``type`` value outside the
    known enum is kept by protobuf as an unknown field and therefore
    decodes as an absent kind.
    """
    message = WebSocketMessage()
    try:
        message.ParseFromString(data)
    except DecodeError as exc:
        raise FrameDecodeError(f"invalid WebSocketMessage ({len(data)} bytes)") from exc

    kind = FrameKind(message.type) if message.HasField("type") else None
    request = _request_from_proto(message.request) if message.HasField("request") else None
    response = _response_from_proto(message.response) if message.HasField("response") else None
    return FrameEnvelope(kind=kind, request=request, response=response)


def encode_frame(envelope: FrameEnvelope) -> bytes:
    """Serialize ``envelope``; only fields that are not ``None`` are written."""
    message = WebSocketMessage()
    if envelope.kind is not None:
        message.type = int(envelope.kind)

    if envelope.request is not None:
        request = envelope.request
        target = message.request
        target.SetInParent()
        for name in ("verb", "path", "body", "id"):
            value = getattr(request, name)
            if value is not None:
                setattr(target, name, value)
        target.headers.extend(request.headers)

    if envelope.response is not None:
        response = envelope.response
        target = message.response
        target.SetInParent()
        for name in ("id", "status", "message", "body"):
            value = getattr(response, name)
            if value is not None:
                setattr(target, name, value)
        target.headers.extend(response.headers)

    return message.SerializeToString()


__all__ = ["FrameDecodeError", "decode_frame", "encode_frame"]
