from __future__ import annotations

import pytest

from expvar_proxy.config import Environment, Settings
from expvar_proxy.exceptions import ConfigurationError


@pytest.fixture(autouse=True)
def _clean_environment(monkeypatch: pytest.MonkeyPatch):
    for name in ("PROXY_ADDR", "PROXY_TIMEOUT", "PROXY_METRICS_ADDR", "FLASK_ENV", "SERVER_THREADS", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


def _env(**overrides) -> Environment:
    return Environment(_env_file=None, **overrides)


def test_load_defaults():
    settings = Settings.load(_env())

    assert settings.listen_host == "127.0.0.1"
    assert settings.listen_port == 8000
    assert settings.timeout_seconds == 30.0
    assert settings.metrics_enabled is False
    assert settings.is_production is True
    assert settings.log_level == "INFO"


def test_load_from_environment_values():
    settings = Settings.load(
        _env(
            PROXY_ADDR=":9000",
            PROXY_TIMEOUT="1m30s",
            PROXY_METRICS_ADDR="127.0.0.1:9100",
            FLASK_ENV="Development",
            SERVER_THREADS=4,
            LOG_LEVEL="debug",
        )
    )

    assert (settings.listen_host, settings.listen_port) == ("0.0.0.0", 9000)
    assert settings.timeout_seconds == 90.0
    assert (settings.metrics_host, settings.metrics_port) == ("127.0.0.1", 9100)
    assert settings.metrics_enabled is True
    assert settings.flask_env == "development"
    assert settings.is_production is False
    assert settings.server_threads == 4
    assert settings.log_level == "DEBUG"


def test_command_line_overrides_take_priority():
    settings = Settings.load(
        _env(PROXY_ADDR="127.0.0.1:8000", PROXY_TIMEOUT="30s", PROXY_METRICS_ADDR=":9100"),
        addr="0.0.0.0:8080",
        timeout="5s",
        metrics_addr="",
    )

    assert (settings.listen_host, settings.listen_port) == ("0.0.0.0", 8080)
    assert settings.timeout_seconds == 5.0
    assert settings.metrics_enabled is False


def test_environment_reads_process_variables(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("PROXY_ADDR", "10.0.0.1:8001")
    monkeypatch.setenv("PROXY_TIMEOUT", "250ms")

    settings = Settings.load(_env())

    assert (settings.listen_host, settings.listen_port) == ("10.0.0.1", 8001)
    assert settings.timeout_seconds == pytest.approx(0.25)


@pytest.mark.parametrize(
    "overrides",
    [
        {"FLASK_ENV": "staging"},
        {"SERVER_THREADS": 0},
        {"PROXY_ADDR": "nowhere"},
        {"PROXY_TIMEOUT": "soon"},
        {"PROXY_METRICS_ADDR": "9100"},
    ],
)
def test_load_rejects_invalid_values(overrides: dict):
    with pytest.raises(ConfigurationError):
        Settings.load(_env(**overrides))
