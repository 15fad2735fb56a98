"""Domain types for playback routing."""

from .intent import PlaybackIntent, TriggerSource, UserActivity

__all__ = ["PlaybackIntent", "TriggerSource", "UserActivity"]
