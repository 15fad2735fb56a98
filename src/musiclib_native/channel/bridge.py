"""Request dispatcher between the application layer and the native components.

Where: src/musiclib_native/channel/bridge.py
What: Wire the metadata resolver and the intent router onto named channels.
Why: Own channel registration (once per messenger) and the startup sequence.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from pathlib import Path
from typing import Any, Final

from musiclib_native.config.config import Config
from musiclib_native.config.settings import settings_for
from musiclib_native.exceptions import InvalidArgumentError
from musiclib_native.features.metadata import MetadataResolver, create_metadata_source
from musiclib_native.features.playback import (
    IntentRouter,
    RouterSettings,
    UserActivity,
    has_voice_entitlement,
)
from musiclib_native.features.playback.usecases import PLAY_METHOD, PlaybackSurface
from musiclib_native.platform.logging import logger
from musiclib_native.shared import MetadataRecord

from .messenger import BinaryMessenger, MethodCall, MethodChannel, MethodResult

__all__ = [
    "NATIVE_METADATA_CHANNEL",
    "PLAYBACK_CHANNEL",
    "READ_METHOD",
    "NativeBridge",
]

NATIVE_METADATA_CHANNEL: Final[str] = "native_metadata"
PLAYBACK_CHANNEL: Final[str] = "siri_playback"
READ_METHOD: Final[str] = "read"
FILE_PATH_ARGUMENT: Final[str] = "filePath"


class NativeBridge:
    """Dispatcher exposing ``native_metadata`` and ``siri_playback``."""

    def __init__(
        self,
        messenger: BinaryMessenger,
        resolver: MetadataResolver,
        *,
        router_settings: RouterSettings | None = None,
        resolver_mode: str = "sync",
        reply_executor: Executor | None = None,
        provisioning_profile: Path | str | None = None,
        request_authorization: Callable[[], None] | None = None,
    ) -> None:
        self._messenger: BinaryMessenger = messenger
        self._resolver: MetadataResolver = resolver
        self._resolver_mode: str = resolver_mode
        self._owns_reply_executor: bool = reply_executor is None and resolver_mode == "async"
        self._reply_executor: Executor | None = (
            ThreadPoolExecutor(max_workers=1, thread_name_prefix="bridge-reply")
            if self._owns_reply_executor
            else reply_executor
        )
        self._provisioning_profile: Path | str | None = provisioning_profile
        self._request_authorization: Callable[[], None] | None = request_authorization
        self._surface: PlaybackSurface | None = None
        self.router: IntentRouter = IntentRouter(self._locate_surface, router_settings)

    @classmethod
    def from_config(
        cls,
        cfg: Config,
        messenger: BinaryMessenger | None = None,
        **kwargs: Any,
    ) -> NativeBridge:
        """Build a bridge with the backend, mode and triggers from ``cfg``."""
        backend, mode, workers = settings_for(cfg)
        resolver = MetadataResolver(create_metadata_source(backend), max_workers=workers)
        router_settings = RouterSettings(
            activity_type=cfg.activity_type,
            activity_item_key=cfg.activity_item_key,
            url_scheme=cfg.url_scheme,
            url_host=cfg.url_host,
            item_id_param=cfg.item_id_param,
        )
        kwargs.setdefault("provisioning_profile", cfg.provisioning_profile)
        return cls(
            messenger or BinaryMessenger(),
            resolver,
            router_settings=router_settings,
            resolver_mode=mode,
            **kwargs,
        )

    @property
    def messenger(self) -> BinaryMessenger:
        return self._messenger

    @property
    def resolver(self) -> MetadataResolver:
        return self._resolver

    # Startup --------------------------------------------------------------

    def start(self) -> None:
        """Register both channels and prompt for voice authorization if entitled."""
        _ = self.register_native_metadata_channel()
        _ = self.register_playback_channel()
        if self._request_authorization is None:
            return
        if not has_voice_entitlement(self._provisioning_profile):
            logger.debug("Voice entitlement absent; skipping authorization prompt")
            return
        try:
            self._request_authorization()
        except Exception as exc:
            logger.warning("Voice authorization request failed: %s", exc)

    def register_native_metadata_channel(self) -> bool:
        """Install the ``native_metadata`` handler; later calls are no-ops."""
        return self._messenger.registration_guard(NATIVE_METADATA_CHANNEL).run(
            lambda: self._register(NATIVE_METADATA_CHANNEL, self._handle_metadata_call)
        )

    def register_playback_channel(self) -> bool:
        """Install the ``siri_playback`` handler; later calls are no-ops."""
        return self._messenger.registration_guard(PLAYBACK_CHANNEL).run(
            lambda: self._register(PLAYBACK_CHANNEL, self._handle_playback_call)
        )

    def _register(self, name: str, handler: Callable[[MethodCall, MethodResult], None]) -> None:
        MethodChannel(name, self._messenger).set_method_call_handler(handler)
        logger.debug(
            "Registered channel %s",
            name,
            extra={"bridge_event": "channel.registered", "channel": name},
        )

    # Playback surface and OS triggers -------------------------------------

    def attach_surface(self, surface: PlaybackSurface | None) -> None:
        """Set (or clear) the application surface receiving ``play`` calls."""
        self._surface = surface

    def attach_application(self, messenger: BinaryMessenger) -> None:
        """Use the application side of ``messenger``'s playback channel as the surface."""
        self.attach_surface(MethodChannel(PLAYBACK_CHANNEL, messenger))

    def _locate_surface(self) -> PlaybackSurface | None:
        return self._surface

    def continue_user_activity(self, activity: UserActivity) -> bool:
        return self.router.handle_activity(activity)

    def open_url(self, url: str) -> bool:
        return self.router.handle_url(url)

    # Channel handlers -----------------------------------------------------

    def _handle_metadata_call(self, call: MethodCall, result: MethodResult) -> None:
        if call.method != READ_METHOD:
            result.not_implemented()
            return

        arguments = call.arguments if isinstance(call.arguments, Mapping) else {}
        file_path = arguments.get(FILE_PATH_ARGUMENT)
        if not isinstance(file_path, str) or not file_path.strip():
            result.success({})
            return

        if self._resolver_mode != "async":
            result.success(self._resolver.resolve(file_path).to_payload())
            return

        def _reply(done: Future[MetadataRecord]) -> None:
            result.success(done.result().to_payload())

        pending = self._resolver.resolve_async(file_path, callback_executor=self._reply_executor)
        pending.add_done_callback(_reply)

    def _handle_playback_call(self, call: MethodCall, result: MethodResult) -> None:
        if call.method != PLAY_METHOD:
            result.not_implemented()
            return
        try:
            _ = self.router.handle_play_call(call.arguments)
        except InvalidArgumentError as exc:
            result.error(exc.code, exc.message)
            return
        result.success(None)

    def close(self) -> None:
        """Stop worker threads owned by the bridge."""
        self._resolver.shutdown(wait=True)
        if self._owns_reply_executor and isinstance(self._reply_executor, ThreadPoolExecutor):
            self._reply_executor.shutdown(wait=False)
