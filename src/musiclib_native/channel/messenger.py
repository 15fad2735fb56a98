"""In-process request/response channel.

Where: src/musiclib_native/channel/messenger.py
What: Named method channels between the application layer and the native layer.
Why: Give the dispatcher one reliable, single-reply transport in both directions.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from concurrent.futures import Future
from dataclasses import dataclass, field
from typing import Any, Final, final

from musiclib_native.platform.logging import logger

__all__ = [
    "NOT_IMPLEMENTED",
    "BinaryMessenger",
    "ChannelError",
    "MethodCall",
    "MethodCallHandler",
    "MethodChannel",
    "MethodResult",
    "OnceGuard",
]


@final
class _NotImplementedType:
    """Marker reply for methods a channel does not implement."""

    def __repr__(self) -> str:
        return "NOT_IMPLEMENTED"


NOT_IMPLEMENTED: Final = _NotImplementedType()


class ChannelError(Exception):
    """Error reply carried back over a channel."""

    def __init__(self, code: str, message: str | None = None, details: object | None = None) -> None:
        super().__init__(f"{code}: {message}" if message else code)
        self.code: str = code
        self.message: str | None = message
        self.details: object | None = details


@dataclass(frozen=True, slots=True)
class MethodCall:
    """One inbound or outbound method invocation."""

    method: str
    arguments: Any = field(default=None)


class MethodResult:
    """Single-use reply slot handed to a method-call handler.

    Exactly one of ``success``, ``error`` or ``not_implemented`` may be
    called; a second reply raises ``RuntimeError``.
    """

    def __init__(self, future: Future[Any] | None = None) -> None:
        self._future: Future[Any] = future if future is not None else Future()
        self._lock: threading.Lock = threading.Lock()
        self._replied: bool = False

    @property
    def future(self) -> Future[Any]:
        return self._future

    @property
    def replied(self) -> bool:
        return self._replied

    def _claim(self) -> None:
        with self._lock:
            if self._replied:
                raise RuntimeError("reply already submitted")
            self._replied = True

    def success(self, value: Any = None) -> None:
        self._claim()
        self._future.set_result(value)

    def error(self, code: str, message: str | None = None, details: object | None = None) -> None:
        self._claim()
        self._future.set_exception(ChannelError(code, message, details))

    def not_implemented(self) -> None:
        self._claim()
        self._future.set_result(NOT_IMPLEMENTED)


MethodCallHandler = Callable[[MethodCall, MethodResult], None]


class OnceGuard:
    """Single-assignment flag: false until the first successful run, never reset."""

    def __init__(self) -> None:
        self._lock: threading.Lock = threading.Lock()
        self._done: bool = False

    @property
    def done(self) -> bool:
        return self._done

    def run(self, action: Callable[[], None]) -> bool:
        """Run ``action`` unless a previous run succeeded.

        Returns True when ``action`` ran and completed. If it raises, the
        flag stays unset and the exception propagates.
        """
        with self._lock:
            if self._done:
                return False
            action()
            self._done = True
            return True


class BinaryMessenger:
    """Registry of channel handlers for both directions of the bridge.

    ``call_native`` delivers application requests to handlers installed by
    the native side; ``call_application`` delivers native-originated calls
    to handlers installed by the application layer.
    """

    def __init__(self) -> None:
        self._native_handlers: dict[str, MethodCallHandler] = {}
        self._application_handlers: dict[str, MethodCallHandler] = {}
        self._registration_guards: dict[str, OnceGuard] = {}
        self._lock: threading.Lock = threading.Lock()

    def registration_guard(self, channel: str) -> OnceGuard:
        """Return the guard shared by every registrar of ``channel`` on this messenger."""
        with self._lock:
            return self._registration_guards.setdefault(channel, OnceGuard())

    def set_method_call_handler(self, channel: str, handler: MethodCallHandler | None) -> None:
        """Install (or with None, remove) the native handler for ``channel``."""
        with self._lock:
            if handler is None:
                _ = self._native_handlers.pop(channel, None)
            else:
                self._native_handlers[channel] = handler

    def set_application_handler(self, channel: str, handler: MethodCallHandler | None) -> None:
        """Install (or with None, remove) the application handler for ``channel``."""
        with self._lock:
            if handler is None:
                _ = self._application_handlers.pop(channel, None)
            else:
                self._application_handlers[channel] = handler

    def has_handler(self, channel: str) -> bool:
        with self._lock:
            return channel in self._native_handlers

    def call_native(self, channel: str, method: str, arguments: Any = None) -> Future[Any]:
        """Send an application request to the native handler of ``channel``."""
        with self._lock:
            handler = self._native_handlers.get(channel)
        return self._invoke(channel, handler, MethodCall(method, arguments))

    def call_application(self, channel: str, method: str, arguments: Any = None) -> Future[Any]:
        """Send a native call to the application handler of ``channel``."""
        with self._lock:
            handler = self._application_handlers.get(channel)
        return self._invoke(channel, handler, MethodCall(method, arguments))

    @staticmethod
    def _invoke(channel: str, handler: MethodCallHandler | None, call: MethodCall) -> Future[Any]:
        result = MethodResult()
        if handler is None:
            result.not_implemented()
            return result.future
        try:
            handler(call, result)
        except Exception as exc:
            logger.error("Handler for %s.%s failed: %s", channel, call.method, exc)
            if not result.replied:
                result.error("HANDLER_ERROR", str(exc))
        return result.future


class MethodChannel:
    """Named channel bound to a messenger."""

    def __init__(self, name: str, messenger: BinaryMessenger) -> None:
        self.name: str = name
        self._messenger: BinaryMessenger = messenger

    def set_method_call_handler(self, handler: MethodCallHandler | None) -> None:
        self._messenger.set_method_call_handler(self.name, handler)

    def invoke_method(self, method: str, arguments: Any = None) -> Future[Any]:
        """Call ``method`` on the application side of this channel."""
        return self._messenger.call_application(self.name, method, arguments)
