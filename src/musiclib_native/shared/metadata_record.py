# Where: musiclib_native.shared.metadata_record
# What: Canonical MetadataRecord dataclass returned by the resolver.
# Why: One normalized shape for every backend and for the channel payload.

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class MetadataRecord:
    """Normalized, display-only metadata for one audio file.

    Every field is optional. A field is only set when the resolved value
    passed validation, so ``None`` always means "unresolved" and never
    stands in for an empty string or a zero duration.
    """

    title: str | None = None
    artist: str | None = None
    album: str | None = None
    genre: str | None = None
    year: int | None = None
    duration_ms: int | None = None
    artwork: bytes | None = None

    @classmethod
    def empty(cls) -> MetadataRecord:
        """Return a record with every field absent."""
        return cls()

    @property
    def is_empty(self) -> bool:
        return all(value is None for value in self._fields().values())

    def _fields(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "artist": self.artist,
            "album": self.album,
            "genre": self.genre,
            "year": self.year,
            "durationMs": self.duration_ms,
            "artworkBytes": self.artwork,
        }

    def to_payload(self) -> dict[str, Any]:
        """Encode as the ``native_metadata.read`` response mapping.

        Unresolved fields are omitted rather than sent as null.
        """
        return {key: value for key, value in self._fields().items() if value is not None}


__all__ = ["MetadataRecord"]
