"""Parsers for the duration and address values accepted on the command line."""

from __future__ import annotations

import math
import re

from expvar_proxy.exceptions import ConfigurationError

_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_DURATION_PART_RE = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")


def parse_duration(raw: str) -> float:
    """Parse a Go-style duration such as ``30s`` or ``1m30s`` into seconds.

    A bare number is read as seconds. The result must be positive.
    """
    value = raw.strip()
    if not value:
        raise ConfigurationError("duration must not be empty")

    try:
        seconds = float(value)
    except ValueError:
        seconds = _parse_duration_parts(value)

    if not math.isfinite(seconds) or seconds <= 0:
        raise ConfigurationError(f"duration {raw!r} must be a positive, finite duration")
    return seconds


def _parse_duration_parts(value: str) -> float:
    total = 0.0
    position = 0
    for match in _DURATION_PART_RE.finditer(value):
        if match.start() != position:
            break
        amount, unit = match.groups()
        total += float(amount) * _DURATION_UNITS[unit]
        position = match.end()

    if position == 0 or position != len(value):
        raise ConfigurationError(f"invalid duration {value!r}")
    return total


def parse_listen_address(raw: str) -> tuple[str, int]:
    """Split ``host:port`` into its parts.

    ``:port`` listens on all interfaces and IPv6 hosts are written in
    brackets, e.g. ``[::1]:8000``.
    """
    value = raw.strip()
    host, sep, port_value = value.rpartition(":")
    if not sep:
        raise ConfigurationError(f"address {raw!r} is missing a port")

    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    elif ":" in host:
        raise ConfigurationError(f"IPv6 address {raw!r} must be enclosed in brackets")

    try:
        port = int(port_value)
    except ValueError as exc:
        raise ConfigurationError(f"invalid port in address {raw!r}") from exc
    if not 0 <= port <= 65535:
        raise ConfigurationError(f"port in address {raw!r} is out of range")

    return host or "0.0.0.0", port
