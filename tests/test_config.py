from __future__ import annotations

import pytest

from pushbridge.config import (
    AppSettings,
    ConfigError,
    NotifySettings,
    endpoint_allowed,
    get_settings,
    validate_endpoint_url,
    validate_websocket_url,
)


def test_defaults() -> None:
    settings = AppSettings()
    assert settings.app_name == "pushbridge"
    assert settings.logging.level == "INFO"
    assert settings.signal.websocket_url == "wss://chat.signal.org/v1/websocket/"
    assert settings.notify.timeout_s == 10.0
    assert settings.notify.detach is False
    assert settings.notify.allowed_endpoints == ["*"]


def test_environment_overrides(monkeypatch) -> None:
    monkeypatch.setenv("PUSHBRIDGE_NOTIFY__TIMEOUT_S", "3.5")
    monkeypatch.setenv("PUSHBRIDGE_LOGGING__LEVEL", "DEBUG")
    settings = get_settings()
    assert settings.notify.timeout_s == 3.5
    assert settings.logging.level == "DEBUG"


def test_env_file_override(tmp_path) -> None:
    env_file = tmp_path / "pushbridge.env"
    env_file.write_text("PUSHBRIDGE_DATABASE__URL=sqlite:////tmp/other.db\n")
    settings = get_settings(_env_file=str(env_file))
    assert settings.database.url == "sqlite:////tmp/other.db"


def test_malformed_websocket_url_is_fatal(monkeypatch) -> None:
    monkeypatch.setenv("PUSHBRIDGE_SIGNAL__WEBSOCKET_URL", "https://chat.example.org/")
    with pytest.raises(ConfigError):
        get_settings()


def test_url_validators() -> None:
    assert validate_websocket_url("ws://localhost:8080/ws") == "ws://localhost:8080/ws"
    assert validate_endpoint_url("http://localhost:8080/push") == "http://localhost:8080/push"
    with pytest.raises(ConfigError):
        validate_websocket_url("wss//missing-colon")
    with pytest.raises(ConfigError):
        validate_endpoint_url("wss://chat.example.org/")


def test_endpoint_allowed() -> None:
    assert endpoint_allowed("https://anything.example.org/", ["*"])
    assert endpoint_allowed("https://push.example.org/a", ["https://push.example.org/"])
    assert not endpoint_allowed("https://evil.example.org/", ["https://push.example.org/"])
    assert not endpoint_allowed("https://push.example.org/a", [])
    assert NotifySettings(allowed_endpoints=["https://push."]).is_allowed("https://push.x/")
