from __future__ import annotations

import json
from collections.abc import Callable, Generator
from typing import Any

import httpx
import pytest
from dependency_injector import providers
from flask import Flask

from expvar_proxy import create_app
from expvar_proxy.config import Settings
from expvar_proxy.services.collector_service import CollectorService


UPSTREAM_URL = "http://upstream.test/debug/vars"


class FakeUpstream:
    """In-process expvar target served through ``httpx.MockTransport``."""

    def __init__(self) -> None:
        self._routes: dict[str, Callable[[httpx.Request], httpx.Response]] = {}
        self.requests: list[httpx.Request] = []

    def respond(self, url: str, body: str | bytes, status_code: int = 200) -> None:
        content = body.encode("utf-8") if isinstance(body, str) else body
        self._routes[url] = lambda request: httpx.Response(status_code, content=content)

    def respond_json(self, url: str, payload: Any) -> None:
        self.respond(url, json.dumps(payload))

    def fail(self, url: str, exc: Exception) -> None:
        def _raise(request: httpx.Request) -> httpx.Response:
            raise exc

        self._routes[url] = _raise

    def route(self, url: str, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self._routes[url] = handler

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self._routes.get(str(request.url))
        if handler is None:
            return httpx.Response(404, text="404 page not found")
        return handler(request)


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def http_client(upstream: FakeUpstream) -> Generator[httpx.Client]:
    client = httpx.Client(transport=httpx.MockTransport(upstream.handle), timeout=1.0)
    try:
        yield client
    finally:
        client.close()


@pytest.fixture
def collector_service(http_client: httpx.Client) -> CollectorService:
    return CollectorService(http_client)


@pytest.fixture
def test_settings() -> Settings:
    return Settings(timeout_seconds=1.0, flask_env="development")


@pytest.fixture
def app(test_settings: Settings, http_client: httpx.Client) -> Generator[Flask]:
    flask_app = create_app(test_settings)
    flask_app.testing = True
    flask_app.container.http_client.override(providers.Object(http_client))
    try:
        yield flask_app
    finally:
        flask_app.container.http_client.reset_override()
        flask_app.container.unwire()


@pytest.fixture
def client(app: Flask) -> Generator:
    with app.test_client() as client:
        yield client


def proxy_request(client, target: str, method: str = "GET"):
    """Send ``target`` on the request line the way an HTTP proxy client does.

    The test client only puts the path on the request line, so the absolute
    URL is set as the raw request target explicitly.
    """
    return client.open(target, method=method, environ_overrides={"REQUEST_URI": target})
