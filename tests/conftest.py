from __future__ import annotations

from typing import Mapping

import pytest

from pushbridge.config import get_settings
from pushbridge.envelopes import FrameEnvelope


class FakeSendHandle:
    """Records every envelope submitted through the transport."""

    def __init__(self) -> None:
        self.sent: list[FrameEnvelope] = []

    def send(self, envelope: FrameEnvelope) -> None:
        self.sent.append(envelope)


class FakeSender:
    """NotificationSender stand-in; optionally fails every call."""

    def __init__(self, error: Exception | None = None) -> None:
        self.posts: list[tuple[str, dict[str, str], bytes]] = []
        self.error = error

    async def post(self, url: str, *, headers: Mapping[str, str], content: bytes) -> None:
        self.posts.append((url, dict(headers), content))
        if self.error is not None:
            raise self.error


@pytest.fixture
def send_handle() -> FakeSendHandle:
    return FakeSendHandle()


@pytest.fixture
def sender() -> FakeSender:
    return FakeSender()


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
