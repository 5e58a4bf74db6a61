"""CLI commands for running the proxy."""

from __future__ import annotations

import logging

import click
from dotenv import load_dotenv
from prometheus_client import start_http_server

from expvar_proxy import create_app
from expvar_proxy.app import App
from expvar_proxy.config import Settings
from expvar_proxy.consts import PROJECT_DESCRIPTION
from expvar_proxy.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


@click.group(help=PROJECT_DESCRIPTION)
def cli() -> None:
    pass


@cli.command()
@click.option(
    "--addr",
    default=None,
    help="Address to listen for proxy requests, e.g. 0.0.0.0:8000. [env: PROXY_ADDR]",
)
@click.option(
    "--timeout",
    default=None,
    help="HTTP client timeout, e.g. 30s or 1m30s. [env: PROXY_TIMEOUT]",
)
@click.option(
    "--metrics-addr",
    default=None,
    help="Address to expose the proxy's own metrics on. [env: PROXY_METRICS_ADDR]",
)
def serve(addr: str | None, timeout: str | None, metrics_addr: str | None) -> None:
    """Serve expvar targets in the Prometheus text format."""
    try:
        settings = Settings.load(addr=addr, timeout=timeout, metrics_addr=metrics_addr)
    except ConfigurationError as exc:
        raise click.UsageError(str(exc)) from exc

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    if settings.metrics_enabled:
        start_http_server(settings.metrics_port, addr=settings.metrics_host)
        logger.info(
            "Exposing proxy metrics on %s:%s", settings.metrics_host, settings.metrics_port
        )

    app = create_app(settings)
    logger.info(
        "listen to %s:%s in Proxy mode, timeout: %ss",
        settings.listen_host,
        settings.listen_port,
        settings.timeout_seconds,
    )
    try:
        _run_server(app, settings)
    finally:
        app.container.shutdown_resources()


def _run_server(app: App, settings: Settings) -> None:
    if settings.is_production:
        from waitress import serve as waitress_serve

        waitress_serve(
            app,
            host=settings.listen_host,
            port=settings.listen_port,
            threads=settings.server_threads,
        )
    else:
        app.run(
            host=settings.listen_host,
            port=settings.listen_port,
            threaded=True,
            debug=True,
            use_reloader=False,
        )


def main() -> None:
    """Main CLI entry point."""
    # Load environment variables from .env file if present
    load_dotenv()

    cli()


if __name__ == "__main__":
    main()
