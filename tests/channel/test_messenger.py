"""Tests for the in-process request/response channel."""

from __future__ import annotations

from typing import Any

import pytest

from musiclib_native.channel import (
    NOT_IMPLEMENTED,
    BinaryMessenger,
    ChannelError,
    MethodCall,
    MethodChannel,
    MethodResult,
)


class TestMethodResult:
    def test_success_completes_future(self) -> None:
        result = MethodResult()

        result.success({"title": "x"})

        assert result.replied
        assert result.future.result() == {"title": "x"}

    def test_error_surfaces_as_channel_error(self) -> None:
        result = MethodResult()

        result.error("INVALID_ARGUMENT", "itemId is required")

        with pytest.raises(ChannelError) as excinfo:
            _ = result.future.result()
        assert excinfo.value.code == "INVALID_ARGUMENT"
        assert excinfo.value.message == "itemId is required"

    def test_second_reply_is_rejected(self) -> None:
        result = MethodResult()
        result.not_implemented()

        with pytest.raises(RuntimeError):
            result.success(None)
        assert result.future.result() is NOT_IMPLEMENTED


class TestBinaryMessenger:
    def test_registration_guard_is_shared_per_channel(self) -> None:
        messenger = BinaryMessenger()

        guard = messenger.registration_guard("native_metadata")

        assert messenger.registration_guard("native_metadata") is guard
        assert messenger.registration_guard("siri_playback") is not guard
        assert BinaryMessenger().registration_guard("native_metadata") is not guard

    def test_call_without_handler_is_not_implemented(self) -> None:
        messenger = BinaryMessenger()

        assert messenger.call_native("native_metadata", "read").result() is NOT_IMPLEMENTED
        assert messenger.call_application("siri_playback", "play").result() is NOT_IMPLEMENTED

    def test_directions_are_independent(self) -> None:
        messenger = BinaryMessenger()
        received: list[tuple[str, MethodCall]] = []

        def native(call: MethodCall, result: MethodResult) -> None:
            received.append(("native", call))
            result.success("from-native")

        def application(call: MethodCall, result: MethodResult) -> None:
            received.append(("application", call))
            result.success("from-application")

        messenger.set_method_call_handler("siri_playback", native)
        messenger.set_application_handler("siri_playback", application)

        assert messenger.call_native("siri_playback", "play", {"itemId": "a"}).result() == "from-native"
        assert messenger.call_application("siri_playback", "play", {"itemId": "b"}).result() == "from-application"
        assert received == [
            ("native", MethodCall("play", {"itemId": "a"})),
            ("application", MethodCall("play", {"itemId": "b"})),
        ]

    def test_removing_handler(self) -> None:
        messenger = BinaryMessenger()
        messenger.set_method_call_handler("native_metadata", lambda call, result: result.success(1))
        assert messenger.has_handler("native_metadata")

        messenger.set_method_call_handler("native_metadata", None)

        assert not messenger.has_handler("native_metadata")
        assert messenger.call_native("native_metadata", "read").result() is NOT_IMPLEMENTED

    def test_raising_handler_replies_with_error(self) -> None:
        messenger = BinaryMessenger()

        def broken(call: MethodCall, result: MethodResult) -> None:
            raise KeyError("boom")

        messenger.set_method_call_handler("native_metadata", broken)

        with pytest.raises(ChannelError) as excinfo:
            _ = messenger.call_native("native_metadata", "read").result()
        assert excinfo.value.code == "HANDLER_ERROR"

    def test_handler_reply_is_kept_when_it_raises_afterwards(self) -> None:
        messenger = BinaryMessenger()

        def replies_then_raises(call: MethodCall, result: MethodResult) -> None:
            result.success("done")
            raise RuntimeError("late failure")

        messenger.set_method_call_handler("native_metadata", replies_then_raises)

        assert messenger.call_native("native_metadata", "read").result() == "done"


def test_method_channel_routes_outbound_calls_to_application() -> None:
    messenger = BinaryMessenger()
    calls: list[Any] = []
    messenger.set_application_handler(
        "siri_playback", lambda call, result: (calls.append(call.arguments), result.success(None))
    )

    channel = MethodChannel("siri_playback", messenger)
    channel.set_method_call_handler(lambda call, result: result.success("native"))

    assert channel.invoke_method("play", {"itemId": "z"}).result() is None
    assert calls == [{"itemId": "z"}]
    assert messenger.has_handler("siri_playback")
