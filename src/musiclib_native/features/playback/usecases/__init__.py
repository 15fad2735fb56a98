"""
Summary: Public surface for playback routing use cases.
Why: Provide a stable import path for the dispatcher and tests.
"""

from .entitlement import has_voice_entitlement
from .ports import PlaybackSurface, SurfaceLocator
from .router import PLAY_METHOD, IntentRouter, RouterSettings

__all__ = [
    "PLAY_METHOD",
    "IntentRouter",
    "PlaybackSurface",
    "RouterSettings",
    "SurfaceLocator",
    "has_voice_entitlement",
]
