from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager

import pytest

from pushbridge import cli
from pushbridge.config import AppSettings

UUID = "3f8f1d3c-0000-4000-8000-00000000000a"


@pytest.fixture
def settings(tmp_path) -> AppSettings:
    return AppSettings(
        database={"url": f"sqlite:///{tmp_path / 'registry.db'}"},
        notify={"allowed_endpoints": ["https://push.example.org/"]},
    )


def test_connection_add_list_remove(settings, capsys) -> None:
    assert cli.main(
        ["connection", "add", UUID, "2", "pw", "https://push.example.org/a"], settings=settings
    ) == 0
    assert cli.main(["connection", "list"], settings=settings) == 0
    out = capsys.readouterr().out
    assert f"{UUID}\t2\thttps://push.example.org/a" in out

    assert cli.main(["connection", "remove", UUID], settings=settings) == 0
    capsys.readouterr()
    assert cli.main(["connection", "list"], settings=settings) == 0
    assert capsys.readouterr().out == ""


def test_connection_errors_exit_nonzero(settings, capsys) -> None:
    assert cli.main(["connection", "remove", UUID], settings=settings) == 1
    assert cli.main(
        ["connection", "add", UUID, "1", "pw", "https://elsewhere.example.org/a"], settings=settings
    ) == 1
    assert cli.main(["connection", "add", UUID, "1", "pw", "not a url"], settings=settings) == 1
    assert "error:" in capsys.readouterr().err


def test_duplicate_connection_exits_nonzero(settings) -> None:
    argv = ["connection", "add", UUID, "1", "pw", "https://push.example.org/a"]
    assert cli.main(argv, settings=settings) == 0
    assert cli.main(argv, settings=settings) == 1


def test_test_endpoint_not_allowed(settings, capsys) -> None:
    assert cli.main(["test", "endpoint", "https://elsewhere.example.org/a"], settings=settings) == 1
    assert "not allowed" in capsys.readouterr().out


def test_test_endpoint_reports_dispatch_result(settings, monkeypatch, capsys) -> None:
    outcomes = iter([True, False])

    async def fake_dispatch(self) -> bool:
        return next(outcomes)

    monkeypatch.setattr("pushbridge.cli.NotificationDispatcher.dispatch", fake_dispatch)

    assert cli.main(["test", "endpoint", "https://push.example.org/a"], settings=settings) == 0
    assert cli.main(["test", "endpoint", "https://push.example.org/a"], settings=settings) == 1
    out = capsys.readouterr().out
    assert "accepted the notification" in out
    assert "did not accept the notification" in out


def test_test_account(settings, monkeypatch, capsys) -> None:
    urls: list[str] = []

    async def fake_check(url: str, open_timeout_s: float) -> str | None:
        urls.append(url)
        return None if len(urls) == 1 else "InvalidStatus: HTTP 403"

    monkeypatch.setattr(cli, "check_account", fake_check)

    assert cli.main(["test", "account", UUID, "3", "pw"], settings=settings) == 0
    assert cli.main(["test", "account", UUID, "3", "pw"], settings=settings) == 1
    assert f"login={UUID}.3" in urls[0]
    out = capsys.readouterr().out
    assert "is valid" in out
    assert "is not valid: InvalidStatus: HTTP 403" in out


def test_check_account_reports_failures() -> None:
    @asynccontextmanager
    async def refusing_connect(url: str, *, open_timeout: float):
        raise ConnectionRefusedError("refused")
        yield  # pragma: no cover

    @asynccontextmanager
    async def accepting_connect(url: str, *, open_timeout: float):
        yield object()

    error = asyncio.run(cli.check_account("wss://x.example.org/", 1.0, refusing_connect))
    assert error is not None and "ConnectionRefusedError" in error
    assert asyncio.run(cli.check_account("wss://x.example.org/", 1.0, accepting_connect)) is None


def test_server_command_serves(settings, monkeypatch) -> None:
    served: list[AppSettings] = []
    monkeypatch.setattr(cli, "serve", served.append)
    assert cli.main(["server"], settings=settings) == 0
    assert served == [settings]


def test_parser_requires_command() -> None:
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args([])
