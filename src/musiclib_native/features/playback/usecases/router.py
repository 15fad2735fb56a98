"""Playback intent routing.

Where: src/musiclib_native/features/playback/usecases/router.py
What: Funnel voice, deep-link and direct-call play requests into one outbound call.
Why: Every trigger shares the same surface lookup and drop-if-absent behaviour.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Final
from urllib.parse import parse_qsl, urlsplit

from musiclib_native.exceptions import InvalidArgumentError
from musiclib_native.platform.logging import logger

from ..domain import PlaybackIntent, TriggerSource, UserActivity
from .ports import SurfaceLocator

__all__ = ["IntentRouter", "RouterSettings", "PLAY_METHOD"]

PLAY_METHOD: Final[str] = "play"
ITEM_ID_ARGUMENT: Final[str] = "itemId"


@dataclass(frozen=True, slots=True)
class RouterSettings:
    """Trigger shapes the router recognizes."""

    activity_type: str = "com.juicewrldapi.musicapp.play"
    activity_item_key: str = "mediaItemId"
    url_scheme: str = "musiclibraryapp"
    url_host: str = "play"
    item_id_param: str = "itemId"


def _non_blank(value: object) -> str | None:
    if isinstance(value, str) and value.strip():
        return value
    return None


class IntentRouter:
    """Route item identifiers from any trigger to the active surface.

    The router holds no registration state; it can be built and exercised
    without any channel wiring.
    """

    def __init__(self, surface_locator: SurfaceLocator, settings: RouterSettings | None = None) -> None:
        self._locate_surface: SurfaceLocator = surface_locator
        self._settings: RouterSettings = settings or RouterSettings()

    @property
    def settings(self) -> RouterSettings:
        return self._settings

    def route(self, item_id: str, trigger: TriggerSource = TriggerSource.DIRECT_CALL) -> bool:
        """Deliver ``item_id`` to the playback surface.

        Returns:
            bool: True when the outbound call was made, False when no
            surface was available and the request was dropped.

        Raises:
            ValueError: If ``item_id`` is blank.
        """
        if _non_blank(item_id) is None:
            raise ValueError("item_id must be a non-empty string")
        return self.dispatch(PlaybackIntent(item_id=item_id, trigger=trigger))

    def dispatch(self, intent: PlaybackIntent) -> bool:
        surface = self._locate_surface()
        if surface is None:
            logger.debug(
                "No playback surface; dropping %s",
                intent.item_id,
                extra={
                    "bridge_event": "playback.route.dropped",
                    "item_id": intent.item_id,
                    "trigger": intent.trigger.value,
                    "reason": "no active surface",
                },
            )
            return False

        _ = surface.invoke_method(PLAY_METHOD, {ITEM_ID_ARGUMENT: intent.item_id})
        logger.info(
            "Routed play request for %s",
            intent.item_id,
            extra={
                "bridge_event": "playback.route.dispatched",
                "item_id": intent.item_id,
                "trigger": intent.trigger.value,
            },
        )
        return True

    def handle_activity(self, activity: UserActivity) -> bool:
        """Handle a continued user activity.

        A matching activity type is always reported as handled, even when it
        carries no usable item identifier.
        """
        if activity.activity_type != self._settings.activity_type:
            self._unhandled(activity.activity_type, TriggerSource.VOICE_CONTINUATION)
            return False

        item_id = _non_blank(activity.user_info.get(self._settings.activity_item_key))
        if item_id is not None:
            _ = self.dispatch(PlaybackIntent(item_id, TriggerSource.VOICE_CONTINUATION))
        else:
            logger.debug("Activity %s carried no item identifier", activity.activity_type)
        return True

    def handle_url(self, url: str) -> bool:
        """Handle an open-URL event; False lets the OS try other handlers."""
        item_id = self.item_id_from_url(url)
        if item_id is None:
            self._unhandled(url, TriggerSource.URL)
            return False
        _ = self.dispatch(PlaybackIntent(item_id, TriggerSource.URL))
        return True

    def item_id_from_url(self, url: str) -> str | None:
        """Extract the item identifier from a deep link, or None if it does not match."""
        try:
            parts = urlsplit(url)
        except ValueError:
            return None
        if parts.scheme.lower() != self._settings.url_scheme.lower():
            return None
        if (parts.hostname or "") != self._settings.url_host.lower():
            return None
        for name, value in parse_qsl(parts.query, keep_blank_values=True):
            if name != self._settings.item_id_param:
                continue
            item_id = _non_blank(value)
            if item_id is not None:
                return item_id
        return None

    def handle_play_call(self, arguments: object) -> bool:
        """Handle a direct ``play`` call from the request channel.

        Raises:
            InvalidArgumentError: If ``itemId`` is missing or blank.
        """
        item_id = (
            _non_blank(arguments.get(ITEM_ID_ARGUMENT))
            if isinstance(arguments, Mapping)
            else None
        )
        if item_id is None:
            raise InvalidArgumentError("itemId is required")
        return self.dispatch(PlaybackIntent(item_id, TriggerSource.DIRECT_CALL))

    @staticmethod
    def _unhandled(target: str, trigger: TriggerSource) -> None:
        logger.debug(
            "Not handling %s",
            target,
            extra={
                "bridge_event": "playback.route.unhandled",
                "target": target,
                "trigger": trigger.value,
            },
        )
