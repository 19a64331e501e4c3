from functools import lru_cache
from typing import Any, Iterable, Literal

from pydantic import AnyUrl, BaseModel, Field, HttpUrl, TypeAdapter, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigError(RuntimeError):
    """Configuration-related error."""
    pass


# ─────────────────────────────────────────────────────────────
# Section configs
# ─────────────────────────────────────────────────────────────


class LoggingSettings(BaseModel):
    level: Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"] = "INFO"
    format: str = "%(asctime)-20s %(name)-32s %(levelname)-8s: %(message)s"


class DatabaseSettings(BaseModel):
    """
    Connection registry location as a SQLAlchemy URL.

    In production, override via:
    - env var:     PUSHBRIDGE_DATABASE__URL
    - dotenv:      .env / .env.local
    - secret file: /run/secrets/pushbridge/database__url
    """
    url: str = Field(
        "sqlite:///pushbridge.db",
        description="SQLAlchemy-style database URL.",
    )


class SignalSettings(BaseModel):
    websocket_url: str = Field(
        "wss://chat.signal.org/v1/websocket/",
        description="Base URL of the realtime message-delivery websocket.",
    )
    open_timeout_s: float = Field(
        10.0, description="Timeout for the websocket opening handshake in seconds."
    )


class NotifySettings(BaseModel):
    timeout_s: float = Field(
        10.0, description="Upper bound for a single webhook call in seconds."
    )
    detach: bool = Field(
        False,
        description=(
            "Run webhook calls as background tasks instead of serializing "
            "them with frame processing."
        ),
    )
    allowed_endpoints: list[str] = Field(
        default_factory=lambda: ["*"],
        description="Webhook URL prefixes connections may register; '*' allows any.",
    )

    def is_allowed(self, endpoint: str) -> bool:
        return endpoint_allowed(endpoint, self.allowed_endpoints)


# ─────────────────────────────────────────────────────────────
# Top-level settings
# ─────────────────────────────────────────────────────────────


class AppSettings(BaseSettings):
    """
    Canonical application configuration for pushbridge.

    Precedence (highest → lowest):

    1. Init kwargs (tests/overrides, ``--config`` env file)
    2. Environment variables
    3. .env and .env.local
    4. Secret files in /run/secrets/pushbridge
    5. Defaults in this class
    """

    model_config = SettingsConfigDict(
        env_prefix="PUSHBRIDGE_",  # PUSHBRIDGE_LOGGING__LEVEL, PUSHBRIDGE_NOTIFY__TIMEOUT_S, ...
        env_file=(".env", ".env.local"),  # .env.local overrides .env
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        secrets_dir="/run/secrets/pushbridge",
        extra="ignore",
        validate_default=True,
    )

    app_name: str = "pushbridge"
    debug: bool = False

    logging: LoggingSettings = LoggingSettings()
    database: DatabaseSettings = DatabaseSettings()  # type: ignore[call-arg]
    signal: SignalSettings = SignalSettings()  # type: ignore[call-arg]
    notify: NotifySettings = NotifySettings()  # type: ignore[call-arg]


@lru_cache(maxsize=1)
def get_settings(**overrides: Any) -> AppSettings:
    """
    Cached accessor for process-wide settings.

    `overrides` are init kwargs → highest precedence (handy in tests).
    """
    settings = AppSettings(**overrides)
    validate_websocket_url(settings.signal.websocket_url)
    return settings


# ─────────────────────────────────────────────────────────────
# URL validation
# ─────────────────────────────────────────────────────────────

_any_url = TypeAdapter(AnyUrl)
_http_url = TypeAdapter(HttpUrl)


def validate_websocket_url(url: str) -> str:
    """Return ``url`` unchanged, or raise ConfigError if it is not a ws/wss URL."""
    try:
        parsed = _any_url.validate_python(url)
    except ValidationError as exc:
        raise ConfigError(f"Cannot parse websocket url {url!r}") from exc
    if parsed.scheme not in ("ws", "wss") or not parsed.host:
        raise ConfigError(f"Cannot parse websocket url {url!r}: expected ws:// or wss://")
    return url


def validate_endpoint_url(url: str) -> str:
    """Return ``url`` unchanged, or raise ConfigError if it is not an http(s) URL."""
    try:
        _http_url.validate_python(url)
    except ValidationError as exc:
        raise ConfigError(f"Cannot parse endpoint url {url!r}") from exc
    return url


def endpoint_allowed(endpoint: str, allowed_endpoints: Iterable[str]) -> bool:
    """Whether ``endpoint`` starts with one of ``allowed_endpoints`` ('*' matches all)."""
    return any(
        allowed == "*" or endpoint.startswith(allowed)
        for allowed in allowed_endpoints
    )
