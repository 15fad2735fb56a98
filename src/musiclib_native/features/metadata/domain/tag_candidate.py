"""
Summary: TagCandidate triples produced by metadata backends.
Why: Let the resolver reconcile sources by rank without knowing tag formats.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum


class TagField(Enum):
    """Record fields a backend can offer candidates for."""

    TITLE = "title"
    ARTIST = "artist"
    ALBUM = "album"
    GENRE = "genre"
    YEAR = "year"
    ARTWORK = "artwork"


class SourceRank(IntEnum):
    """Precedence of a tag source; lower ranks win."""

    COMMON = 1
    FORMAT = 2
    VENDOR = 3


@dataclass(frozen=True, slots=True)
class TagCandidate:
    """One raw value read from one tag source.

    ``value`` is left as the backend produced it (a string, a list of
    strings, a timestamp object, bytes); normalization happens in the
    resolver.
    """

    field: TagField
    value: object
    rank: SourceRank


__all__ = ["SourceRank", "TagCandidate", "TagField"]
