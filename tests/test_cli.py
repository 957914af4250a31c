from __future__ import annotations

import argparse

import pytest

from falconwatch import cli
from falconwatch.config import FalconConfig
from falconwatch.exceptions import FalconTransportError
from falconwatch.models.devices import DeviceScroll


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "FALCON_CLIENT_ID",
        "FALCON_CLIENT_SECRET",
        "FALCON_API_BASE",
        "FALCON_INTERVAL",
        "FALCON_REQUEST_TIMEOUT",
        "FALCON_QUIET",
    ):
        monkeypatch.delenv(name, raising=False)


def test_missing_credentials_exit_with_usage(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main([]) == 2

    err = capsys.readouterr().err
    assert "--client-id is required" in err
    assert "--client-secret is required" in err
    assert "usage: falconwatch" in err


def test_missing_secret_only(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main(["--client-id", "abc"]) == 2

    err = capsys.readouterr().err
    assert "--client-id is required" not in err
    assert "--client-secret is required" in err


def test_malformed_base_url_is_config_error(capsys: pytest.CaptureFixture[str]) -> None:
    code = cli.main(["--client-id", "a", "--client-secret", "b", "--api-base", "not a url"])

    assert code == 2
    assert "invalid api base url" in capsys.readouterr().err


def test_bad_interval_is_rejected_by_parser() -> None:
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["--client-id", "a", "--client-secret", "b", "--interval", "soon"])
    assert exc_info.value.code == 2


def test_flags_override_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FALCON_CLIENT_ID", "env-id")
    monkeypatch.setenv("FALCON_CLIENT_SECRET", "env-secret")
    monkeypatch.setenv("FALCON_INTERVAL", "5m")

    args = cli.build_parser().parse_args(["--client-id", "flag-id", "--interval", "30s", "-q"])
    config = cli.load_config(args)

    assert config.client_id == "flag-id"
    assert config.client_secret == "env-secret"
    assert config.interval == 30.0
    assert config.quiet is True
    assert config.base_url == "https://api.us-2.crowdstrike.com"


def test_once_runs_single_cycle(monkeypatch: pytest.MonkeyPatch) -> None:
    seen: list[FalconConfig] = []

    class _FakeClient:
        def __init__(self, config: FalconConfig) -> None:
            seen.append(config)

        async def __aenter__(self) -> _FakeClient:
            return self

        async def __aexit__(self, *exc: object) -> None:
            return None

        async def get_device_scroll(self) -> DeviceScroll:
            return DeviceScroll.from_body('{"resources": ["a", "b"]}')

    monkeypatch.setattr(cli, "FalconClient", _FakeClient)

    code = cli.main(["--client-id", "a", "--client-secret", "b", "--once", "--timeout", "5s"])

    assert code == 0
    assert seen[0].request_timeout == 5.0


def test_once_reports_fetch_error(monkeypatch: pytest.MonkeyPatch) -> None:
    class _FailingClient:
        def __init__(self, config: FalconConfig) -> None:
            pass

        async def __aenter__(self) -> _FailingClient:
            return self

        async def __aexit__(self, *exc: object) -> None:
            return None

        async def get_device_scroll(self) -> DeviceScroll:
            raise FalconTransportError("connection refused")

    monkeypatch.setattr(cli, "FalconClient", _FailingClient)

    assert cli.main(["--client-id", "a", "--client-secret", "b", "--once"]) == 1


def test_duration_type_wraps_config_error() -> None:
    with pytest.raises(argparse.ArgumentTypeError):
        cli._duration("whenever")
