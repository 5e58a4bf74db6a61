"""Dependency injection container for services."""

from collections.abc import Iterator

import httpx
from dependency_injector import containers, providers

from expvar_proxy.config import Settings
from expvar_proxy.consts import PROJECT_NAME
from expvar_proxy.services.collector_service import CollectorService


def _http_client(timeout_seconds: float) -> Iterator[httpx.Client]:
    client = httpx.Client(
        timeout=timeout_seconds,
        follow_redirects=True,
        headers={"User-Agent": PROJECT_NAME},
    )
    try:
        yield client
    finally:
        client.close()


class ServiceContainer(containers.DeclarativeContainer):
    """Container for service dependency injection."""

    # Configuration providers
    config = providers.Dependency(instance_of=Settings)

    # Shared upstream client; one timeout for every scrape
    http_client = providers.Resource(
        _http_client,
        timeout_seconds=config.provided.timeout_seconds,
    )

    # Collector service - fetches and flattens expvar documents
    collector_service = providers.Singleton(
        CollectorService,
        http_client=http_client,
    )
