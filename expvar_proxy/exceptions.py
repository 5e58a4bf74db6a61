"""Exception hierarchy shared by the collector and the proxy handler."""

from __future__ import annotations


class ConfigurationError(Exception):
    """Raised when application configuration is invalid."""

    pass


class CollectionError(RuntimeError):
    """Base class for failures while scraping a target."""


class TargetInaccessible(CollectionError):
    """Raised when the target cannot be reached or its body cannot be read."""

    def __init__(self, message: str, *, target: str):
        super().__init__(f"inaccessible target; {message}")
        self.target = target


class TargetInvalid(CollectionError):
    """Raised when the target responded with something that is not a JSON object."""

    def __init__(self, message: str, *, target: str):
        super().__init__(message)
        self.target = target


class UnsupportedMetricName(CollectionError):
    """Raised when a metric path contains a character outside the ASCII range."""

    def __init__(self, character: str, name: str):
        super().__init__(
            f"non-ascii character {character!r} is unsupported, "
            f"please configure the metric {name!r} explicitly"
        )
        self.character = character
        self.name = name
