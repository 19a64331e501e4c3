"""Message classes for ``websocket_resources.proto``.

The descriptors are assembled with ``descriptor_pb2`` and registered in a
private pool, so no protoc step is needed at build time. Keep the field
numbers in sync with the .proto file next to this module.
"""

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory

PACKAGE = "signalservice"

_F = descriptor_pb2.FieldDescriptorProto


def _add_field(message, name, number, type_, *, label=_F.LABEL_OPTIONAL, type_name=None):
    field = message.field.add(name=name, number=number, type=type_, label=label)
    if type_name is not None:
        field.type_name = f".{PACKAGE}.{type_name}"
    return field


def _build_file() -> descriptor_pb2.FileDescriptorProto:
    file_proto = descriptor_pb2.FileDescriptorProto(
        name="pushbridge/websocket_resources.proto",
        package=PACKAGE,
        syntax="proto2",
    )

    request = file_proto.message_type.add(name="WebSocketRequestMessage")
    _add_field(request, "verb", 1, _F.TYPE_STRING)
    _add_field(request, "path", 2, _F.TYPE_STRING)
    _add_field(request, "body", 3, _F.TYPE_BYTES)
    _add_field(request, "headers", 5, _F.TYPE_STRING, label=_F.LABEL_REPEATED)
    _add_field(request, "id", 4, _F.TYPE_UINT64)

    response = file_proto.message_type.add(name="WebSocketResponseMessage")
    _add_field(response, "id", 1, _F.TYPE_UINT64)
    _add_field(response, "status", 2, _F.TYPE_UINT32)
    _add_field(response, "message", 3, _F.TYPE_STRING)
    _add_field(response, "headers", 5, _F.TYPE_STRING, label=_F.LABEL_REPEATED)
    _add_field(response, "body", 4, _F.TYPE_BYTES)

    message = file_proto.message_type.add(name="WebSocketMessage")
    type_enum = message.enum_type.add(name="Type")
    for value_name, number in (("UNKNOWN", 0), ("REQUEST", 1), ("RESPONSE", 2)):
        type_enum.value.add(name=value_name, number=number)
    _add_field(message, "type", 1, _F.TYPE_ENUM, type_name="WebSocketMessage.Type")
    _add_field(message, "request", 2, _F.TYPE_MESSAGE, type_name="WebSocketRequestMessage")
    _add_field(message, "response", 3, _F.TYPE_MESSAGE, type_name="WebSocketResponseMessage")

    return file_proto


_pool = descriptor_pool.DescriptorPool()
DESCRIPTOR = _pool.AddSerializedFile(_build_file().SerializeToString())

WebSocketRequestMessage = message_factory.GetMessageClass(
    _pool.FindMessageTypeByName(f"{PACKAGE}.WebSocketRequestMessage")
)
WebSocketResponseMessage = message_factory.GetMessageClass(
    _pool.FindMessageTypeByName(f"{PACKAGE}.WebSocketResponseMessage")
)
WebSocketMessage = message_factory.GetMessageClass(
    _pool.FindMessageTypeByName(f"{PACKAGE}.WebSocketMessage")
)

__all__ = [
    "DESCRIPTOR",
    "WebSocketRequestMessage",
    "WebSocketResponseMessage",
    "WebSocketMessage",
]
