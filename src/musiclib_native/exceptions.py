"""
Summary: Exception hierarchy shared by the resolver, router and channel layers.
Why: Keep caller-visible failure codes stable across entry points.
"""

from __future__ import annotations

from typing import ClassVar


class BridgeError(Exception):
    """Base class for errors raised by musiclib-native."""

    code: ClassVar[str] = "BRIDGE_ERROR"

    def __init__(self, message: str, *, details: object | None = None) -> None:
        super().__init__(message)
        self.message: str = message
        self.details: object | None = details


class InvalidArgumentError(BridgeError):
    """A required call argument is missing or blank."""

    code: ClassVar[str] = "INVALID_ARGUMENT"


class MetadataSourceError(BridgeError):
    """A metadata backend could not open or inspect a file."""

    code: ClassVar[str] = "METADATA_SOURCE_ERROR"


class UnsupportedBackendError(BridgeError, ValueError):
    """The configured metadata backend name is unknown."""

    code: ClassVar[str] = "UNSUPPORTED_BACKEND"


__all__ = [
    "BridgeError",
    "InvalidArgumentError",
    "MetadataSourceError",
    "UnsupportedBackendError",
]
