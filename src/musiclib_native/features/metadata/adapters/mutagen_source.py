"""Mutagen-backed metadata source.

Where: src/musiclib_native/features/metadata/adapters/mutagen_source.py
What: Expose mutagen's easy view, native tag blocks and vendor atoms as ranked candidates.
Why: Default desktop backend; mutagen already decodes every container we accept.
"""

from __future__ import annotations

import base64
from collections.abc import Iterator
from typing import Any, ClassVar, override

import mutagen
from mutagen import FileType
from mutagen._vorbis import VCommentDict
from mutagen.flac import Picture
from mutagen.id3 import ID3, TCON
from mutagen.mp4 import MP4Tags

from musiclib_native.exceptions import MetadataSourceError
from musiclib_native.platform.logging import logger

from ..domain import SourceRank, TagCandidate, TagField
from ..usecases.ports import MetadataHandle, MetadataSource

__all__ = ["MutagenMetadataHandle", "MutagenMetadataSource"]


class MutagenMetadataHandle(MetadataHandle):
    """Tag sources of one file loaded through mutagen."""

    COMMON_KEYS: ClassVar[dict[TagField, str]] = {
        TagField.TITLE: "title",
        TagField.ARTIST: "artist",
        TagField.ALBUM: "album",
    }

    ID3_FRAMES: ClassVar[dict[TagField, str]] = {
        TagField.TITLE: "TIT2",
        TagField.ARTIST: "TPE1",
        TagField.ALBUM: "TALB",
        TagField.GENRE: "TCON",
    }

    MP4_ATOMS: ClassVar[dict[TagField, str]] = {
        TagField.TITLE: "\xa9nam",
        TagField.ARTIST: "\xa9ART",
        TagField.ALBUM: "\xa9alb",
        TagField.GENRE: "\xa9gen",
    }

    VORBIS_KEYS: ClassVar[dict[TagField, str]] = {
        TagField.TITLE: "title",
        TagField.ARTIST: "artist",
        TagField.ALBUM: "album",
        TagField.GENRE: "genre",
    }

    def __init__(self, audio: FileType, easy: FileType | None) -> None:
        self._audio: FileType | None = audio
        self._easy: FileType | None = easy

    def _require_audio(self) -> FileType:
        if self._audio is None:
            raise MetadataSourceError("handle already closed")
        return self._audio

    @override
    def duration_seconds(self) -> float | None:
        info = getattr(self._require_audio(), "info", None)
        length = getattr(info, "length", None)
        return length if isinstance(length, (int, float)) else None

    @override
    def common_tags(self) -> Iterator[TagCandidate]:
        audio = self._require_audio()
        easy_tags: Any = self._easy.tags if self._easy is not None else None
        if easy_tags:
            for field, key in self.COMMON_KEYS.items():
                value = easy_tags.get(key)
                if value:
                    yield TagCandidate(field, value, SourceRank.COMMON)

        for picture in self._container_pictures(audio):
            yield TagCandidate(TagField.ARTWORK, picture, SourceRank.COMMON)

    @staticmethod
    def _container_pictures(audio: FileType) -> Iterator[bytes]:
        """Artwork stored outside the format-native frame space."""
        for picture in getattr(audio, "pictures", None) or []:
            yield picture.data

        tags: Any = audio.tags
        if isinstance(tags, MP4Tags):
            for cover in tags.get("covr", []):
                yield bytes(cover)
        elif isinstance(tags, VCommentDict):
            for encoded in tags.get("metadata_block_picture", []):
                try:
                    yield Picture(base64.b64decode(encoded)).data
                except (ValueError, TypeError, mutagen.MutagenError) as exc:
                    logger.debug("Skipping undecodable embedded picture: %s", exc)

    @override
    def format_tags(self) -> Iterator[TagCandidate]:
        tags: Any = self._require_audio().tags
        if isinstance(tags, ID3):
            for field, frame_id in self.ID3_FRAMES.items():
                for frame in tags.getall(frame_id):
                    value = frame.genres if isinstance(frame, TCON) else frame.text
                    yield TagCandidate(field, value, SourceRank.FORMAT)
            for picture in tags.getall("APIC"):
                yield TagCandidate(TagField.ARTWORK, picture.data, SourceRank.FORMAT)
        elif isinstance(tags, MP4Tags):
            for field, atom in self.MP4_ATOMS.items():
                if atom in tags:
                    yield TagCandidate(field, tags[atom], SourceRank.FORMAT)
        elif isinstance(tags, VCommentDict):
            for field, key in self.VORBIS_KEYS.items():
                values = tags.get(key)
                if values:
                    yield TagCandidate(field, values, SourceRank.FORMAT)

    @override
    def vendor_tags(self) -> Iterator[TagCandidate]:
        tags: Any = self._require_audio().tags
        if isinstance(tags, MP4Tags):
            if "\xa9day" in tags:
                yield TagCandidate(TagField.YEAR, tags["\xa9day"], SourceRank.VENDOR)
            if "\xa9gen" in tags:
                yield TagCandidate(TagField.GENRE, tags["\xa9gen"], SourceRank.VENDOR)
            for index in tags.get("gnre", []):
                # iTunes stores ID3v1 genre numbers offset by one.
                if isinstance(index, int) and 0 < index <= len(TCON.GENRES):
                    yield TagCandidate(TagField.GENRE, TCON.GENRES[index - 1], SourceRank.VENDOR)
        elif isinstance(tags, ID3):
            for frame_id in ("TDRC", "TYER"):
                for frame in tags.getall(frame_id):
                    yield TagCandidate(TagField.YEAR, frame.text, SourceRank.VENDOR)
        elif isinstance(tags, VCommentDict):
            for key in ("date", "year"):
                values = tags.get(key)
                if values:
                    yield TagCandidate(TagField.YEAR, values, SourceRank.VENDOR)

    @override
    def close(self) -> None:
        # mutagen closes the file after loading; drop our references.
        self._audio = None
        self._easy = None


class MutagenMetadataSource(MetadataSource):
    """Open files with ``mutagen.File`` (raw and easy views)."""

    name: str = "mutagen"

    @override
    def open(self, path: str) -> MutagenMetadataHandle:
        audio = mutagen.File(path)
        if audio is None:
            raise MetadataSourceError(f"Unsupported or unrecognized audio file: {path}")
        try:
            easy = mutagen.File(path, easy=True)
        except (mutagen.MutagenError, OSError) as exc:
            logger.debug("No easy tag view for %s: %s", path, exc)
            easy = None
        return MutagenMetadataHandle(audio, easy)
