"""Exceptions for smoothlock."""

from __future__ import annotations


class SmoothLockError(Exception):
    """Base class for smoothlock errors."""


class TransportError(SmoothLockError):
    """A request to the device could not be completed."""

    def __init__(self, message: str, url: str | None = None) -> None:
        super().__init__(message)
        self.url = url


class ParseError(SmoothLockError):
    """The device answered with a body that is not a valid status payload."""

    def __init__(self, message: str, body: str | None = None) -> None:
        super().__init__(message)
        self.body = body


class ConfigurationError(SmoothLockError):
    """The resolved configuration is invalid."""
