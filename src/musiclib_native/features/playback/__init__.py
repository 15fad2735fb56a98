"""Playback routing feature: voice, deep-link and direct-call play requests."""

from .domain import PlaybackIntent, TriggerSource, UserActivity
from .usecases import IntentRouter, RouterSettings, has_voice_entitlement

__all__ = [
    "IntentRouter",
    "PlaybackIntent",
    "RouterSettings",
    "TriggerSource",
    "UserActivity",
    "has_voice_entitlement",
]
