"""Shared pytest fixtures: in-memory metadata backends, executors and surfaces."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from concurrent.futures import Executor, Future
from typing import Any

import pytest

from musiclib_native.features.metadata.domain import SourceRank, TagCandidate, TagField


class FakeHandle:
    """Metadata handle serving fixed candidates and recording close calls."""

    def __init__(
        self,
        *,
        duration: float | None = None,
        common: dict[TagField, object] | None = None,
        format_specific: dict[TagField, object] | None = None,
        vendor: list[tuple[TagField, object]] | None = None,
        fail_on: str | None = None,
        close_error: Exception | None = None,
    ) -> None:
        self.duration = duration
        self.common = common or {}
        self.format_specific = format_specific or {}
        self.vendor = vendor or []
        self.fail_on = fail_on
        self.close_error = close_error
        self.closed = 0
        self.vendor_reads = 0

    def _maybe_fail(self, stage: str) -> None:
        if self.fail_on == stage:
            raise RuntimeError(f"corrupt {stage} block")

    def duration_seconds(self) -> float | None:
        self._maybe_fail("duration")
        return self.duration

    def common_tags(self) -> Iterable[TagCandidate]:
        self._maybe_fail("common")
        return [TagCandidate(f, v, SourceRank.COMMON) for f, v in self.common.items()]

    def format_tags(self) -> Iterable[TagCandidate]:
        self._maybe_fail("format")
        return [TagCandidate(f, v, SourceRank.FORMAT) for f, v in self.format_specific.items()]

    def vendor_tags(self) -> Iterable[TagCandidate]:
        self.vendor_reads += 1
        self._maybe_fail("vendor")
        return [TagCandidate(f, v, SourceRank.VENDOR) for f, v in self.vendor]

    def close(self) -> None:
        self.closed += 1
        if self.close_error is not None:
            raise self.close_error


class FakeSource:
    """Metadata source returning a prepared handle (or raising on open)."""

    name: str = "fake"

    def __init__(self, handle: FakeHandle | None = None, open_error: Exception | None = None) -> None:
        self.handle = handle or FakeHandle()
        self.open_error = open_error
        self.opened: list[str] = []

    def open(self, path: str) -> FakeHandle:
        self.opened.append(path)
        if self.open_error is not None:
            raise self.open_error
        return self.handle


class SyncExecutor(Executor):
    """Executor running every task immediately on the calling thread."""

    def __init__(self) -> None:
        self.submitted = 0

    def submit(self, fn: Callable[..., Any], /, *args: Any, **kwargs: Any) -> Future[Any]:
        self.submitted += 1
        future: Future[Any] = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as exc:
            future.set_exception(exc)
        return future


class RecordingSurface:
    """Playback surface capturing outbound calls."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, object]] = []

    def invoke_method(self, method: str, arguments: object | None = None) -> object:
        self.calls.append((method, arguments))
        return None


@pytest.fixture
def fake_handle_factory() -> type[FakeHandle]:
    return FakeHandle


@pytest.fixture
def fake_source_factory() -> type[FakeSource]:
    return FakeSource


@pytest.fixture
def sync_executor() -> SyncExecutor:
    return SyncExecutor()


@pytest.fixture
def surface() -> RecordingSurface:
    return RecordingSurface()
