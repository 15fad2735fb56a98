"""Where: src/musiclib_native/config/settings.py
What: Derived runtime settings sourced from persisted configuration.
Why: Expose validated values to feature layers without file I/O.
Trade-offs: - Invalid values fall back to defaults with a warning instead of failing startup.
"""

from __future__ import annotations

from typing import Final

from musiclib_native.config.config import Config, config as app_config
from musiclib_native.platform.logging import logger

SUPPORTED_BACKENDS: Final[tuple[str, ...]] = ("mutagen", "tinytag")
RESOLVER_MODES: Final[tuple[str, ...]] = ("sync", "async")
RESOLVER_WORKERS_DEFAULT: Final[int] = 2


def validated_backend(value: object) -> str:
    """Return a supported backend name, defaulting to mutagen."""
    name = str(value).strip().lower() if value is not None else ""
    if name in SUPPORTED_BACKENDS:
        return name
    logger.warning("Unknown metadata_backend %r; using %r", value, SUPPORTED_BACKENDS[0])
    return SUPPORTED_BACKENDS[0]


def validated_mode(value: object) -> str:
    """Return a supported resolver mode, defaulting to sync."""
    mode = str(value).strip().lower() if value is not None else ""
    if mode in RESOLVER_MODES:
        return mode
    logger.warning("Unknown resolver_mode %r; using %r", value, RESOLVER_MODES[0])
    return RESOLVER_MODES[0]


def validated_workers(value: object) -> int:
    """Return a positive worker count."""
    if isinstance(value, int) and not isinstance(value, bool) and value > 0:
        return value
    return RESOLVER_WORKERS_DEFAULT


def settings_for(cfg: Config) -> tuple[str, str, int]:
    """Validate the backend, mode and worker count of ``cfg``."""
    return (
        validated_backend(cfg.metadata_backend),
        validated_mode(cfg.resolver_mode),
        validated_workers(cfg.resolver_workers),
    )


METADATA_BACKEND, RESOLVER_MODE, RESOLVER_WORKERS = settings_for(app_config)


__all__ = [
    "SUPPORTED_BACKENDS",
    "RESOLVER_MODES",
    "METADATA_BACKEND",
    "RESOLVER_MODE",
    "RESOLVER_WORKERS",
    "settings_for",
    "validated_backend",
    "validated_mode",
    "validated_workers",
]
