"""
Summary: Playback intents and the OS events that carry them.
Why: Give every trigger source one shape before dispatch.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum


class TriggerSource(Enum):
    """Where a playback request came from."""

    VOICE_CONTINUATION = "voice"
    URL = "url"
    DIRECT_CALL = "direct"


@dataclass(frozen=True, slots=True)
class PlaybackIntent:
    """A request to play ``item_id``; lives only for one dispatch."""

    item_id: str
    trigger: TriggerSource


@dataclass(frozen=True, slots=True)
class UserActivity:
    """A continued user activity reported by the OS."""

    activity_type: str
    user_info: Mapping[str, object] = field(default_factory=dict)


__all__ = ["PlaybackIntent", "TriggerSource", "UserActivity"]
