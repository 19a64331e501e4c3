def test_import() -> None:
    import pushbridge
    from pushbridge import __version__
    assert isinstance(__version__, str)


def test_proto_messages_available() -> None:
    from pushbridge.transports.proto import websocket_resources_pb2 as pb

    assert pb.DESCRIPTOR.package == "signalservice"
    assert pb.WebSocketMessage().HasField("type") is False
