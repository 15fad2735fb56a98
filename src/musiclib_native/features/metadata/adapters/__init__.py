"""
Summary: Metadata backends and the factory selecting one by name.
Why: Pick the platform tag reader at deployment time through configuration.
"""

from __future__ import annotations

from collections.abc import Callable

from musiclib_native.exceptions import UnsupportedBackendError

from ..usecases.ports import MetadataSource


def _mutagen_source() -> MetadataSource:
    from .mutagen_source import MutagenMetadataSource

    return MutagenMetadataSource()


def _tinytag_source() -> MetadataSource:
    from .tinytag_source import TinyTagMetadataSource

    return TinyTagMetadataSource()


_BACKENDS: dict[str, Callable[[], MetadataSource]] = {
    "mutagen": _mutagen_source,
    "tinytag": _tinytag_source,
}


def create_metadata_source(name: str) -> MetadataSource:
    """Instantiate the backend registered under ``name``."""
    try:
        factory = _BACKENDS[name.strip().lower()]
    except KeyError:
        raise UnsupportedBackendError(
            f"Unknown metadata backend: {name!r}", details=sorted(_BACKENDS)
        ) from None
    return factory()


__all__ = ["create_metadata_source"]
