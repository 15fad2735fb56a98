"""Tests for the request dispatcher.

Where: tests/channel/test_native_bridge.py
What: Exercise channel registration, the metadata read and play calls, and startup.
Why: The dispatcher is the only seam the application layer talks to.
"""

from __future__ import annotations

import plistlib
import threading
from pathlib import Path
from typing import Any

import pytest
from pytest_mock import MockerFixture

from musiclib_native.channel import (
    NATIVE_METADATA_CHANNEL,
    NOT_IMPLEMENTED,
    PLAYBACK_CHANNEL,
    BinaryMessenger,
    ChannelError,
    MethodCall,
    MethodResult,
    NativeBridge,
    OnceGuard,
)
from musiclib_native.config.config import Config
from musiclib_native.features.metadata import MetadataResolver
from musiclib_native.features.metadata.adapters.tinytag_source import TinyTagMetadataSource
from musiclib_native.features.metadata.domain import TagField
from musiclib_native.features.playback import UserActivity


@pytest.fixture
def source(fake_handle_factory: Any, fake_source_factory: Any) -> Any:
    handle = fake_handle_factory(
        duration=180.4,
        common={TagField.TITLE: "Lucid Dreams", TagField.ARTIST: "Juice WRLD"},
    )
    return fake_source_factory(handle=handle)


@pytest.fixture
def bridge(source: Any) -> NativeBridge:
    native = NativeBridge(BinaryMessenger(), MetadataResolver(source))
    native.start()
    return native


def _write_profile(tmp_path: Path, entitled: bool) -> Path:
    document = plistlib.dumps({"Entitlements": {"com.apple.developer.siri": entitled}})
    path = tmp_path / "embedded.mobileprovision"
    _ = path.write_bytes(b"\x30\x82envelope" + document + b"\x00signature")
    return path


class TestRegistration:
    def test_each_channel_is_registered_once(self, source: Any, mocker: MockerFixture) -> None:
        messenger = BinaryMessenger()
        spy = mocker.spy(messenger, "set_method_call_handler")
        native = NativeBridge(messenger, MetadataResolver(source))

        assert native.register_native_metadata_channel() is True
        assert native.register_native_metadata_channel() is False
        native.start()
        native.start()

        channels = [call.args[0] for call in spy.call_args_list]
        assert channels == [NATIVE_METADATA_CHANNEL, PLAYBACK_CHANNEL]

    def test_bridges_sharing_a_messenger_register_once(
        self, source: Any, mocker: MockerFixture
    ) -> None:
        messenger = BinaryMessenger()
        spy = mocker.spy(messenger, "set_method_call_handler")
        first = NativeBridge(messenger, MetadataResolver(source))
        second = NativeBridge(messenger, MetadataResolver(source))

        first.start()

        assert second.register_native_metadata_channel() is False
        assert second.register_playback_channel() is False
        second.start()
        channels = [call.args[0] for call in spy.call_args_list]
        assert channels == [NATIVE_METADATA_CHANNEL, PLAYBACK_CHANNEL]
        assert messenger.registration_guard(PLAYBACK_CHANNEL).done

    def test_failed_registration_can_be_retried(self) -> None:
        guard = OnceGuard()
        attempts: list[int] = []

        def flaky() -> None:
            attempts.append(1)
            if len(attempts) == 1:
                raise RuntimeError("channel unavailable")

        with pytest.raises(RuntimeError):
            _ = guard.run(flaky)
        assert not guard.done
        assert guard.run(flaky) is True
        assert guard.run(flaky) is False
        assert len(attempts) == 2


class TestMetadataChannel:
    def test_read_returns_payload(self, bridge: NativeBridge) -> None:
        payload = bridge.messenger.call_native(
            NATIVE_METADATA_CHANNEL, "read", {"filePath": "/music/lucid.mp3"}
        ).result()

        assert payload == {"title": "Lucid Dreams", "artist": "Juice WRLD", "durationMs": 180400}

    @pytest.mark.parametrize("arguments", [{"filePath": ""}, {"filePath": "  "}, {}, None, "path"])
    def test_blank_path_returns_empty_mapping_without_opening(
        self, bridge: NativeBridge, source: Any, arguments: object
    ) -> None:
        payload = bridge.messenger.call_native(NATIVE_METADATA_CHANNEL, "read", arguments).result()

        assert payload == {}
        assert source.opened == []

    def test_unreadable_file_returns_empty_mapping(self, fake_source_factory: Any) -> None:
        native = NativeBridge(
            BinaryMessenger(),
            MetadataResolver(fake_source_factory(open_error=OSError("denied"))),
        )
        native.start()

        payload = native.messenger.call_native(
            NATIVE_METADATA_CHANNEL, "read", {"filePath": "/music/locked.mp3"}
        ).result()

        assert payload == {}

    def test_unknown_method_is_not_implemented(self, bridge: NativeBridge) -> None:
        reply = bridge.messenger.call_native(NATIVE_METADATA_CHANNEL, "write", {"filePath": "/a.mp3"})

        assert reply.result() is NOT_IMPLEMENTED

    def test_async_mode_replies_on_reply_executor(
        self, fake_handle_factory: Any, fake_source_factory: Any, sync_executor: Any
    ) -> None:
        source = fake_source_factory(handle=fake_handle_factory(common={TagField.ALBUM: "Legends"}))
        resolver = MetadataResolver(source, executor_factory=lambda: sync_executor)
        reply_executor = type(sync_executor)()
        native = NativeBridge(
            BinaryMessenger(), resolver, resolver_mode="async", reply_executor=reply_executor
        )
        native.start()

        payload = native.messenger.call_native(
            NATIVE_METADATA_CHANNEL, "read", {"filePath": "/music/legends.mp3"}
        ).result(timeout=5)

        assert payload == {"album": "Legends"}
        assert reply_executor.submitted == 1
        assert sync_executor.submitted == 1

    def test_async_mode_with_owned_executors(self, source: Any) -> None:
        native = NativeBridge(BinaryMessenger(), MetadataResolver(source), resolver_mode="async")
        native.start()
        try:
            payload = native.messenger.call_native(
                NATIVE_METADATA_CHANNEL, "read", {"filePath": "/music/lucid.mp3"}
            ).result(timeout=5)
        finally:
            native.close()

        assert payload["title"] == "Lucid Dreams"

    def test_close_with_read_in_flight_still_replies(
        self, source: Any, mocker: MockerFixture
    ) -> None:
        release = threading.Event()
        open_handle = source.open

        def gated_open(path: str) -> Any:
            _ = release.wait(timeout=5)
            return open_handle(path)

        _ = mocker.patch.object(source, "open", side_effect=gated_open)
        native = NativeBridge(
            BinaryMessenger(), MetadataResolver(source, max_workers=1), resolver_mode="async"
        )
        native.start()
        reply = native.messenger.call_native(
            NATIVE_METADATA_CHANNEL, "read", {"filePath": "/music/lucid.mp3"}
        )

        closer = threading.Thread(target=native.close)
        closer.start()
        release.set()
        closer.join(timeout=5)

        assert not closer.is_alive()
        assert reply.result(timeout=5)["title"] == "Lucid Dreams"


class TestPlaybackChannel:
    def test_play_call_reaches_surface(self, bridge: NativeBridge, surface: Any) -> None:
        bridge.attach_surface(surface)

        reply = bridge.messenger.call_native(PLAYBACK_CHANNEL, "play", {"itemId": "abc123"})

        assert reply.result() is None
        assert surface.calls == [("play", {"itemId": "abc123"})]

    def test_missing_item_id_replies_invalid_argument(self, bridge: NativeBridge, surface: Any) -> None:
        bridge.attach_surface(surface)

        with pytest.raises(ChannelError) as excinfo:
            _ = bridge.messenger.call_native(PLAYBACK_CHANNEL, "play", {}).result()

        assert excinfo.value.code == "INVALID_ARGUMENT"
        assert excinfo.value.message == "itemId is required"
        assert surface.calls == []

    def test_unknown_playback_method(self, bridge: NativeBridge) -> None:
        reply = bridge.messenger.call_native(PLAYBACK_CHANNEL, "pause", {"itemId": "abc"})

        assert reply.result() is NOT_IMPLEMENTED

    def test_os_triggers_reach_application_handler(self, bridge: NativeBridge) -> None:
        received: list[MethodCall] = []

        def application(call: MethodCall, result: MethodResult) -> None:
            received.append(call)
            result.success(None)

        bridge.messenger.set_application_handler(PLAYBACK_CHANNEL, application)
        bridge.attach_application(bridge.messenger)

        assert bridge.open_url("musiclibraryapp://play?itemId=from-link") is True
        assert bridge.continue_user_activity(
            UserActivity("com.juicewrldapi.musicapp.play", {"mediaItemId": "from-voice"})
        )
        assert bridge.open_url("musiclibraryapp://pause?itemId=x") is False
        assert received == [
            MethodCall("play", {"itemId": "from-link"}),
            MethodCall("play", {"itemId": "from-voice"}),
        ]

    def test_triggers_without_surface_are_dropped(self, bridge: NativeBridge) -> None:
        assert bridge.open_url("musiclibraryapp://play?itemId=abc") is True
        assert bridge.messenger.call_native(PLAYBACK_CHANNEL, "play", {"itemId": "abc"}).result() is None


class TestStartup:
    def test_authorization_requested_when_entitled(
        self, source: Any, tmp_path: Path, mocker: MockerFixture
    ) -> None:
        request = mocker.Mock()
        native = NativeBridge(
            BinaryMessenger(),
            MetadataResolver(source),
            provisioning_profile=_write_profile(tmp_path, True),
            request_authorization=request,
        )

        native.start()

        request.assert_called_once_with()
        assert native.messenger.has_handler(NATIVE_METADATA_CHANNEL)
        assert native.messenger.has_handler(PLAYBACK_CHANNEL)

    @pytest.mark.parametrize("entitled", [False, None])
    def test_authorization_skipped_without_entitlement(
        self, source: Any, tmp_path: Path, mocker: MockerFixture, entitled: bool | None
    ) -> None:
        request = mocker.Mock()
        profile = _write_profile(tmp_path, entitled) if entitled is not None else None
        native = NativeBridge(
            BinaryMessenger(),
            MetadataResolver(source),
            provisioning_profile=profile,
            request_authorization=request,
        )

        native.start()

        request.assert_not_called()

    def test_authorization_failure_does_not_abort_startup(
        self, source: Any, tmp_path: Path, mocker: MockerFixture
    ) -> None:
        request = mocker.Mock(side_effect=RuntimeError("denied by user"))
        native = NativeBridge(
            BinaryMessenger(),
            MetadataResolver(source),
            provisioning_profile=_write_profile(tmp_path, True),
            request_authorization=request,
        )

        native.start()

        assert native.messenger.has_handler(PLAYBACK_CHANNEL)


def test_from_config_applies_backend_and_triggers(surface: Any) -> None:
    cfg = Config(metadata_backend="tinytag", url_scheme="jw", url_host="listen")

    native = NativeBridge.from_config(cfg)
    native.attach_surface(surface)

    assert isinstance(native.resolver.source, TinyTagMetadataSource)
    assert native.open_url("jw://listen?itemId=42") is True
    assert native.open_url("musiclibraryapp://play?itemId=42") is False
    assert surface.calls == [("play", {"itemId": "42"})]
