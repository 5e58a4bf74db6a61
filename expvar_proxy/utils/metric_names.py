"""Metric name sanitization for the Prometheus exposition format."""

from __future__ import annotations

import string

from expvar_proxy.exceptions import UnsupportedMetricName

_ALLOWED = frozenset(string.ascii_letters + string.digits + "_:")
_MAX_ASCII = 0x7F


def sanitize_metric_name(name: str) -> str:
    """Rewrite ``name`` so it matches ``[a-zA-Z_:][a-zA-Z0-9_:]*``.

    ASCII characters outside the allowed set are replaced with ``_``, which
    turns the ``/`` and ``-`` separators common in expvar names into
    Prometheus-style underscores. Nothing else is normalized.

    Non-ASCII characters cannot be mapped to ASCII reliably, so they raise
    :class:`UnsupportedMetricName` instead of being guessed at.
    """
    chars = []
    for char in name:
        if char in _ALLOWED:
            chars.append(char)
        elif ord(char) > _MAX_ASCII:
            raise UnsupportedMetricName(char, name)
        else:
            chars.append("_")
    return "".join(chars)
