"""Scrape an expvar endpoint and turn its JSON body into metric samples."""

from __future__ import annotations

import json
import logging
import math
import re
from time import perf_counter
from typing import Any
from urllib.parse import urlsplit

import httpx
from prometheus_client import Counter, Gauge, Histogram

from expvar_proxy.exceptions import (
    TargetInaccessible,
    TargetInvalid,
    UnsupportedMetricName,
)
from expvar_proxy.services.flattener import MetricSet, flatten_metrics

logger = logging.getLogger(__name__)

# Proxy self-instrumentation
EXPVAR_SCRAPES_TOTAL = Counter(
    "expvar_proxy_scrapes_total",
    "Total upstream scrapes by outcome",
    ["outcome"],
)
EXPVAR_SCRAPE_DURATION_SECONDS = Histogram(
    "expvar_proxy_scrape_duration_seconds",
    "Duration of upstream scrapes including parsing and flattening",
)
EXPVAR_SCRAPED_METRICS = Gauge(
    "expvar_proxy_scraped_metrics",
    "Number of metrics produced by the last successful scrape",
)

_SUPPORTED_SCHEMES = {"http", "https"}

# Some expvar producers emit "\xNN" escapes, which are not valid JSON.
_HEX_ESCAPE_RE = re.compile(r"\\x..")


def repair_escapes(text: str) -> str:
    """Replace every ``\\xNN`` sequence with ``?`` so the body can be parsed."""
    return _HEX_ESCAPE_RE.sub("?", text)


def _parse_number(literal: str) -> float:
    value = float(literal)
    if not math.isfinite(value):
        raise ValueError(f"number {literal} is out of range")
    return value


def _reject_constant(literal: str) -> float:
    raise ValueError(f"invalid literal {literal}")


class CollectorService:
    """Fetches expvar documents through a shared HTTP client."""

    def __init__(self, http_client: httpx.Client) -> None:
        """Initialize CollectorService.

        Args:
            http_client: Client used for every scrape. Its timeout applies to
                all requests and it must be safe to share between threads.
        """
        self.http_client = http_client

    def collect(self, target: str) -> MetricSet:
        """Scrape ``target`` and return its flattened metrics.

        Raises:
            TargetInaccessible: the request failed or the body could not be read.
            TargetInvalid: the body is not a JSON object.
            UnsupportedMetricName: a key contains a non-ASCII character.
        """
        start = perf_counter()
        try:
            metrics = self._collect(target)
        except TargetInaccessible:
            EXPVAR_SCRAPES_TOTAL.labels(outcome="inaccessible").inc()
            raise
        except TargetInvalid:
            EXPVAR_SCRAPES_TOTAL.labels(outcome="invalid").inc()
            raise
        except UnsupportedMetricName:
            EXPVAR_SCRAPES_TOTAL.labels(outcome="unsupported_name").inc()
            raise
        finally:
            EXPVAR_SCRAPE_DURATION_SECONDS.observe(perf_counter() - start)

        EXPVAR_SCRAPES_TOTAL.labels(outcome="success").inc()
        EXPVAR_SCRAPED_METRICS.set(len(metrics))
        return metrics

    def _collect(self, target: str) -> MetricSet:
        body = self._fetch(target)
        document = self._decode(target, body)
        if document is None:
            return {}
        return flatten_metrics(document)

    def _fetch(self, target: str) -> bytes:
        self._check_target(target)
        try:
            with self.http_client.stream("GET", target) as response:
                logger.debug(
                    "Upstream responded",
                    extra={"target": target, "status_code": response.status_code},
                )
                try:
                    return response.read()
                except httpx.HTTPError as exc:
                    raise TargetInaccessible(
                        f"error reading body of {target!r}: {exc}", target=target
                    ) from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise TargetInaccessible(
                f"error scraping {target!r}: {exc}", target=target
            ) from exc

    def _check_target(self, target: str) -> None:
        """Reject targets that are not absolute http(s) URLs before any I/O."""
        parts = urlsplit(target)
        if parts.scheme not in _SUPPORTED_SCHEMES:
            raise TargetInaccessible(
                f"error scraping {target!r}: unsupported protocol scheme {parts.scheme!r}",
                target=target,
            )
        if not parts.netloc:
            raise TargetInaccessible(
                f"error scraping {target!r}: no host in request URL", target=target
            )

    def _decode(self, target: str, body: bytes) -> dict[str, Any] | None:
        text = repair_escapes(body.decode("utf-8", errors="replace"))
        try:
            document = json.loads(
                text,
                parse_int=_parse_number,
                parse_float=_parse_number,
                parse_constant=_reject_constant,
            )
        except (ValueError, RecursionError) as exc:
            raise TargetInvalid(
                f"error unmarshalling JSON from {target!r}: {exc}", target=target
            ) from exc

        if document is not None and not isinstance(document, dict):
            raise TargetInvalid(
                f"error unmarshalling JSON from {target!r}: "
                f"expected an object, got {type(document).__name__}",
                target=target,
            )
        return document
