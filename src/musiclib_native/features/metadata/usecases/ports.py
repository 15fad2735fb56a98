"""Summary: Ports defining the metadata backend capability.
Why: Write the fallback algorithm once against an abstraction, not per backend."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol, runtime_checkable

from ..domain import TagCandidate


@runtime_checkable
class MetadataHandle(Protocol):
    """An opened audio file exposing its tag sources."""

    def duration_seconds(self) -> float | None:
        """Container-reported duration in seconds, if any."""
        ...

    def common_tags(self) -> Iterable[TagCandidate]:
        """Candidates from the normalized, format-agnostic tag view."""
        ...

    def format_tags(self) -> Iterable[TagCandidate]:
        """Candidates from the format-native tag block (ID3, MP4 atoms, Vorbis)."""
        ...

    def vendor_tags(self) -> Iterable[TagCandidate]:
        """Candidates from vendor/extension tags (release date, user genre)."""
        ...

    def close(self) -> None:
        """Release anything held by the handle."""
        ...


@runtime_checkable
class MetadataSource(Protocol):
    """Backend able to open local audio files for tag inspection."""

    name: str

    def open(self, path: str) -> MetadataHandle:
        """Open ``path``; raise when the file cannot be inspected."""
        ...


__all__ = ["MetadataHandle", "MetadataSource"]
