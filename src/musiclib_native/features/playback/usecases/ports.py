"""Summary: Ports defining where routed playback requests are delivered.
Why: Let the router run without a live UI; tests swap in a recording surface."""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol, runtime_checkable


@runtime_checkable
class PlaybackSurface(Protocol):
    """Application surface able to receive the outbound ``play`` call."""

    def invoke_method(self, method: str, arguments: object | None = None) -> object:
        """Send ``method`` with ``arguments`` to the application layer."""
        ...


SurfaceLocator = Callable[[], PlaybackSurface | None]


__all__ = ["PlaybackSurface", "SurfaceLocator"]
