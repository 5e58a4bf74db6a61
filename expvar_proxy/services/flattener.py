"""Flatten a decoded expvar document into Prometheus metric samples."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from expvar_proxy.utils.metric_names import sanitize_metric_name

logger = logging.getLogger(__name__)

PATH_SEPARATOR = "_"

MetricSet = dict[str, float]


def flatten_metrics(document: Mapping[str, Any]) -> MetricSet:
    """Collect every numeric and boolean leaf of ``document``.

    Nested keys are joined with ``_`` and the joined path is sanitized as a
    whole. Entries are visited depth first in document order, so when two
    paths sanitize to the same name the later one wins.

    Raises:
        UnsupportedMetricName: if any visited path contains a non-ASCII
            character. No partial result is returned.
    """
    metrics: MetricSet = {}
    pending: list[tuple[str, Any]] = list(reversed(document.items()))

    while pending:
        path, value = pending.pop()
        name = sanitize_metric_name(path)

        match value:
            case bool():
                _emit(metrics, name, path, 1.0 if value else 0.0)
            case int() | float():
                _emit(metrics, name, path, float(value))
            case dict():
                pending.extend(
                    (f"{path}{PATH_SEPARATOR}{key}", child)
                    for key, child in reversed(value.items())
                )
            case str() | list():
                # No scalar representation in the exposition format.
                pass
            case None:
                logger.debug("Dropping null value for metric %s", name)
            case _:
                logger.debug(
                    "Dropping unsupported value type %s for metric %s",
                    type(value).__name__,
                    name,
                )

    return metrics


def _emit(metrics: MetricSet, name: str, path: str, value: float) -> None:
    if name in metrics:
        logger.warning(
            "Metric path %r collides with an earlier path named %s; keeping the later value",
            path,
            name,
        )
    metrics[name] = value
