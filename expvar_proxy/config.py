"""Configuration management using Pydantic settings.

This module implements a two-layer configuration system:
1. Environment: Loads raw values from environment variables (UPPER_CASE)
2. Settings: Clean application settings with lowercase fields and derived values

Usage:
    # Production: Load from environment
    settings = Settings.load()

    # Command line overrides take priority over the environment
    settings = Settings.load(addr="0.0.0.0:8000", timeout="10s")

    # Tests: Construct directly with test values
    settings = Settings(timeout_seconds=1.0)
"""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from expvar_proxy.consts import (
    DEFAULT_LISTEN_ADDR,
    DEFAULT_SERVER_THREADS,
    DEFAULT_TIMEOUT,
)
from expvar_proxy.exceptions import ConfigurationError
from expvar_proxy.utils.config_parsing import parse_duration, parse_listen_address

# Project root directory (parent of expvar_proxy/)
_PROJECT_ROOT = Path(__file__).resolve().parent.parent

_VALID_ENVS = {"development", "production"}


class Environment(BaseSettings):
    """Raw environment variable loading.

    This class loads values directly from environment variables with UPPER_CASE names.
    It should not contain any derived values or transformation logic.
    """

    model_config = SettingsConfigDict(
        env_file=_PROJECT_ROOT / ".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    PROXY_ADDR: str = Field(
        default=DEFAULT_LISTEN_ADDR,
        description="Address to listen for proxy requests, e.g. 0.0.0.0:8000"
    )
    PROXY_TIMEOUT: str = Field(
        default=DEFAULT_TIMEOUT,
        description="Upstream HTTP client timeout, e.g. 30s or 1m30s"
    )
    PROXY_METRICS_ADDR: str = Field(
        default="",
        description="Address for the proxy's own Prometheus metrics (disabled when empty)"
    )
    FLASK_ENV: str = Field(default="production")
    SERVER_THREADS: int = Field(
        default=DEFAULT_SERVER_THREADS,
        description="Number of waitress worker threads serving proxy requests"
    )
    LOG_LEVEL: str = Field(default="INFO")


class Settings(BaseModel):
    """Application settings with lowercase fields and derived values.

    For production, use Settings.load() to load from environment.
    For tests, construct directly with test values (defaults provided for convenience).
    """

    model_config = ConfigDict(from_attributes=True)

    listen_host: str = "127.0.0.1"
    listen_port: int = 8000
    timeout_seconds: float = 30.0
    metrics_host: str | None = None
    metrics_port: int | None = None
    flask_env: str = "production"
    server_threads: int = DEFAULT_SERVER_THREADS
    log_level: str = "INFO"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.flask_env == "production"

    @property
    def metrics_enabled(self) -> bool:
        """Check if the self-instrumentation listener should be started."""
        return self.metrics_port is not None

    @classmethod
    def load(
        cls,
        env: Environment | None = None,
        *,
        addr: str | None = None,
        timeout: str | None = None,
        metrics_addr: str | None = None,
    ) -> "Settings":
        """Load settings from environment variables.

        Args:
            env: Optional Environment instance (for testing). If None, loads from environment.
            addr: Listen address overriding PROXY_ADDR.
            timeout: Client timeout overriding PROXY_TIMEOUT.
            metrics_addr: Telemetry address overriding PROXY_METRICS_ADDR.

        Returns:
            Settings instance with all values resolved

        Raises:
            ConfigurationError: If any value cannot be parsed
        """
        if env is None:
            env = Environment()

        flask_env = env.FLASK_ENV.strip().lower()
        if flask_env not in _VALID_ENVS:
            raise ConfigurationError(
                "FLASK_ENV must be one of {development, production}; "
                f"got '{flask_env or '<empty>'}'"
            )

        if env.SERVER_THREADS <= 0:
            raise ConfigurationError("SERVER_THREADS must be greater than zero")

        listen_host, listen_port = parse_listen_address(addr or env.PROXY_ADDR)
        timeout_seconds = parse_duration(timeout or env.PROXY_TIMEOUT)

        # Resolve the telemetry listener: empty means disabled
        metrics_host: str | None = None
        metrics_port: int | None = None
        raw_metrics_addr = metrics_addr if metrics_addr is not None else env.PROXY_METRICS_ADDR
        if raw_metrics_addr.strip():
            metrics_host, metrics_port = parse_listen_address(raw_metrics_addr)

        return cls(
            listen_host=listen_host,
            listen_port=listen_port,
            timeout_seconds=timeout_seconds,
            metrics_host=metrics_host,
            metrics_port=metrics_port,
            flask_env=flask_env,
            server_threads=env.SERVER_THREADS,
            log_level=env.LOG_LEVEL.upper(),
        )
