"""Proxy endpoint: scrape the addressed expvar target and render it for Prometheus."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from http import HTTPStatus

from dependency_injector.wiring import Provide, inject
from flask import Blueprint, Response, request

from expvar_proxy.consts import EXPOSITION_CONTENT_TYPE
from expvar_proxy.exceptions import CollectionError, TargetInaccessible
from expvar_proxy.services.collector_service import CollectorService
from expvar_proxy.services.container import ServiceContainer

logger = logging.getLogger(__name__)

_ERROR_CONTENT_TYPE = "text/plain; charset=utf-8"

proxy_bp = Blueprint("proxy", __name__)


def render_metric_set(metrics: Mapping[str, float]) -> str:
    """Render metrics as ``<name> <value>`` lines sorted by name."""
    return "".join(f"{name} {metrics[name]:f}\n" for name in sorted(metrics))


def request_target() -> str:
    """Return the request target exactly as it appeared on the request line.

    For proxy-form requests this is the absolute URL of the expvar endpoint.
    Origin-form requests yield a bare path, which the collector rejects.
    """
    raw = request.environ.get("REQUEST_URI") or request.environ.get("RAW_URI") or ""
    # WSGI servers hand over the raw bytes as latin-1 decoded text
    return raw.encode("latin-1").decode("utf-8", errors="replace")


# Runs before URL routing is consulted so that every method and path is
# proxied; the application registers no routes of its own.
@proxy_bp.before_app_request
@inject
def proxy(
    collector_service: CollectorService = Provide[ServiceContainer.collector_service],
) -> Response:
    """Scrape the URL this request addresses and return its metrics.

    The proxy is used as an HTTP proxy for the expvar endpoint, so the
    absolute URL on the request line (scheme, host, path and query) is the
    scrape target, forwarded without re-quoting.
    """
    target = request_target()
    logger.info("%s %s %s", request.remote_addr, request.method, target)

    metrics = collector_service.collect(target)

    return Response(
        render_metric_set(metrics),
        status=HTTPStatus.OK,
        content_type=EXPOSITION_CONTENT_TYPE,
    )


@proxy_bp.app_errorhandler(TargetInaccessible)
def _handle_target_inaccessible(exc: TargetInaccessible) -> Response:
    return _error_response(exc, HTTPStatus.GATEWAY_TIMEOUT)


@proxy_bp.app_errorhandler(CollectionError)
def _handle_collection_error(exc: CollectionError) -> Response:
    return _error_response(exc, HTTPStatus.BAD_GATEWAY)


def _error_response(exc: CollectionError, status: HTTPStatus) -> Response:
    logger.warning(
        "%s %s failed to gather metrics: %s",
        request.remote_addr,
        request.method,
        exc,
    )
    return Response(str(exc), status=status, content_type=_ERROR_CONTENT_TYPE)
