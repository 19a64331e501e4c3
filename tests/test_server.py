from __future__ import annotations

import asyncio

import pytest
from sqlalchemy.orm import Session

from pushbridge.bridge import NotificationBridge
from pushbridge.config import AppSettings, ConfigError
from pushbridge.registry import ConnectionInfo, add_connection, create_registry_engine
from pushbridge.server import build_bridge, run_connections, serve

INFO_A = ConnectionInfo("uuid-a", 1, "pw-a", "https://push.example.org/a")
INFO_B = ConnectionInfo("uuid-b", 2, "pw-b", "https://push.example.org/b")


class FakeChannel:
    def __init__(self, bridge: NotificationBridge, error: Exception | None = None) -> None:
        self.bridge = bridge
        self.error = error
        self.ran = False

    async def run(self) -> None:
        self.ran = True
        if self.error is not None:
            raise self.error


def test_build_bridge_uses_settings() -> None:
    settings = AppSettings(signal={"websocket_url": "wss://chat.example.org/v1/websocket/"})

    bridge = build_bridge(settings, INFO_A)

    assert bridge.get_address().startswith("wss://chat.example.org/v1/websocket/?login=uuid-a.1")
    assert bridge._dispatcher.webhook_url == INFO_A.endpoint


def test_connections_run_independently() -> None:
    settings = AppSettings()
    channels: list[FakeChannel] = []

    def factory(bridge: NotificationBridge) -> FakeChannel:
        error = RuntimeError("closed") if not channels else None
        channels.append(FakeChannel(bridge, error))
        return channels[-1]

    results = asyncio.run(run_connections(settings, [INFO_A, INFO_B], factory))

    assert all(channel.ran for channel in channels)
    assert isinstance(results[0], RuntimeError)
    assert results[1] is None
    assert channels[0].bridge is not channels[1].bridge


def test_malformed_url_aborts_before_running() -> None:
    settings = AppSettings(signal={"websocket_url": "https://not-a-websocket.example.org"})
    channels: list[FakeChannel] = []

    def factory(bridge: NotificationBridge) -> FakeChannel:
        channels.append(FakeChannel(bridge))
        return channels[-1]

    with pytest.raises(ConfigError):
        asyncio.run(run_connections(settings, [INFO_A], factory))
    assert channels == []


def test_serve_without_connections_returns(tmp_path) -> None:
    settings = AppSettings(database={"url": f"sqlite:///{tmp_path / 'registry.db'}"})
    serve(settings)


def test_serve_runs_registered_connections(tmp_path, monkeypatch) -> None:
    settings = AppSettings(database={"url": f"sqlite:///{tmp_path / 'registry.db'}"})
    engine = create_registry_engine(settings.database)
    with Session(engine) as session, session.begin():
        add_connection(session, INFO_A.uuid, INFO_A.device_id, INFO_A.password, INFO_A.endpoint)

    seen: list[list[str]] = []

    async def fake_run_connections(settings, infos, channel_factory=None):
        seen.append([info.uuid for info in infos])
        return []

    monkeypatch.setattr("pushbridge.server.run_connections", fake_run_connections)
    serve(settings)

    assert seen == [[INFO_A.uuid]]
