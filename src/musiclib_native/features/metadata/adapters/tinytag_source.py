"""TinyTag-backed metadata source.

Where: src/musiclib_native/features/metadata/adapters/tinytag_source.py
What: Flat retriever-style backend built on TinyTag's single normalized view.
Why: Lightweight deployment target where mutagen is not shipped.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any, ClassVar, override

from tinytag import TinyTag, TinyTagException

from musiclib_native.exceptions import MetadataSourceError

from ..domain import SourceRank, TagCandidate, TagField
from ..usecases.ports import MetadataHandle, MetadataSource

__all__ = ["TinyTagMetadataHandle", "TinyTagMetadataSource"]


class TinyTagMetadataHandle(MetadataHandle):
    """Tag sources of one file parsed by TinyTag."""

    COMMON_ATTRIBUTES: ClassVar[dict[TagField, str]] = {
        TagField.TITLE: "title",
        TagField.ARTIST: "artist",
        TagField.ALBUM: "album",
        TagField.GENRE: "genre",
        TagField.YEAR: "year",
    }

    def __init__(self, tag: Any) -> None:
        self._tag: Any = tag

    def _require_tag(self) -> Any:
        if self._tag is None:
            raise MetadataSourceError("handle already closed")
        return self._tag

    @override
    def duration_seconds(self) -> float | None:
        duration = getattr(self._require_tag(), "duration", None)
        return duration if isinstance(duration, (int, float)) else None

    @override
    def common_tags(self) -> Iterator[TagCandidate]:
        tag = self._require_tag()
        for field, attribute in self.COMMON_ATTRIBUTES.items():
            value = getattr(tag, attribute, None)
            if value is not None:
                yield TagCandidate(field, value, SourceRank.COMMON)
        images = getattr(tag, "images", None)
        front_cover = getattr(images, "front_cover", None)
        if front_cover is not None:
            yield TagCandidate(TagField.ARTWORK, front_cover.data, SourceRank.COMMON)

    @override
    def format_tags(self) -> Iterator[TagCandidate]:
        tag = self._require_tag()
        # Album artist stands in for a missing track artist.
        album_artist = getattr(tag, "albumartist", None)
        if album_artist is not None:
            yield TagCandidate(TagField.ARTIST, album_artist, SourceRank.FORMAT)
        images = getattr(tag, "images", None)
        any_image = getattr(images, "any", None)
        if any_image is not None:
            yield TagCandidate(TagField.ARTWORK, any_image.data, SourceRank.FORMAT)

    @override
    def vendor_tags(self) -> Iterator[TagCandidate]:
        return iter(())

    @override
    def close(self) -> None:
        self._tag = None


class TinyTagMetadataSource(MetadataSource):
    """Open files with ``TinyTag.get`` including embedded images."""

    name: str = "tinytag"

    @override
    def open(self, path: str) -> TinyTagMetadataHandle:
        try:
            tag = TinyTag.get(path, image=True)
        except (OSError, TinyTagException) as exc:
            raise MetadataSourceError(f"Cannot open {path}: {exc}") from exc
        return TinyTagMetadataHandle(tag)
