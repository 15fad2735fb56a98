"""Best-effort metadata resolution.

Where: src/musiclib_native/features/metadata/usecases/resolver.py
What: Reconcile common, format-specific and vendor tag sources into a MetadataRecord.
Why: One backend-agnostic fallback algorithm for every MetadataSource.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Iterable
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Final

from musiclib_native.platform.logging import logger
from musiclib_native.shared import MetadataRecord

from ..domain import ResolutionFault, SourceRank, TagCandidate, TagField
from ..domain.fault import FaultStage
from ._tag_utils import artwork_bytes, clean_text, duration_to_ms, location_to_path, parse_year
from .ports import MetadataHandle, MetadataSource

__all__ = ["MetadataResolver", "ResolutionOutcome"]

ResolutionOutcome = MetadataRecord | ResolutionFault

_VENDOR_FIELDS: Final[frozenset[TagField]] = frozenset({TagField.YEAR, TagField.GENRE})


def _normalize(candidate: TagCandidate) -> object | None:
    if candidate.field is TagField.YEAR:
        return parse_year(candidate.value)
    if candidate.field is TagField.ARTWORK:
        return artwork_bytes(candidate.value)
    return clean_text(candidate.value)


class _FieldAccumulator:
    """Collect the first valid value offered for each field."""

    def __init__(self) -> None:
        self.values: dict[TagField, object] = {}

    def has(self, field: TagField) -> bool:
        return field in self.values

    def offer(self, candidate: TagCandidate) -> bool:
        if candidate.field in self.values:
            return False
        normalized = _normalize(candidate)
        if normalized is None:
            return False
        self.values[candidate.field] = normalized
        return True

    def offer_all(self, candidates: Iterable[TagCandidate], rank: SourceRank) -> None:
        for candidate in candidates:
            if candidate.rank is not rank:
                logger.debug("Skipping %s candidate offered as %s", candidate.rank.name, rank.name)
                continue
            _ = self.offer(candidate)

    def build(self, duration_ms: int | None) -> MetadataRecord:
        def text(field: TagField) -> str | None:
            value = self.values.get(field)
            return value if isinstance(value, str) else None

        year = self.values.get(TagField.YEAR)
        artwork = self.values.get(TagField.ARTWORK)
        return MetadataRecord(
            title=text(TagField.TITLE),
            artist=text(TagField.ARTIST),
            album=text(TagField.ALBUM),
            genre=text(TagField.GENRE),
            year=year if isinstance(year, int) else None,
            duration_ms=duration_ms,
            artwork=artwork if isinstance(artwork, bytes) else None,
        )


class MetadataResolver:
    """Resolve a MetadataRecord for a local audio file.

    ``resolve`` never raises: any failure becomes an all-absent record.
    ``resolve_result`` keeps the fault visible for diagnostics and tests.
    """

    def __init__(
        self,
        source: MetadataSource,
        *,
        max_workers: int = 2,
        executor_factory: Callable[[], Executor] | None = None,
    ) -> None:
        self._source: MetadataSource = source
        self._max_workers: int = max_workers
        self._executor_factory: Callable[[], Executor] | None = executor_factory
        self._executor: Executor | None = None
        self._executor_lock: threading.Lock = threading.Lock()

    @property
    def source(self) -> MetadataSource:
        return self._source

    def resolve(self, location: str | None) -> MetadataRecord:
        """Resolve metadata for ``location`` (a path or ``file://`` URL)."""
        outcome = self.resolve_result(location)
        if isinstance(outcome, ResolutionFault):
            return MetadataRecord.empty()
        return outcome

    def resolve_result(self, location: str | None) -> ResolutionOutcome:
        """Resolve metadata, reporting failures as a ResolutionFault."""
        # No file selected; not a failure.
        if location is None or not location.strip():
            return MetadataRecord.empty()

        started = time.perf_counter()
        try:
            handle = self._source.open(location_to_path(location))
        except Exception as exc:
            return self._fault(location, "open", exc)

        try:
            record = self._read(handle)
        except Exception as exc:
            return self._fault(location, "read", exc)
        finally:
            self._release(handle, location)

        elapsed_ms = (time.perf_counter() - started) * 1000.0
        if record.is_empty:
            logger.debug(
                "No metadata found in %s",
                location,
                extra={"bridge_event": "metadata.resolve.empty", "source_path": location},
            )
        else:
            logger.debug(
                "Resolved metadata for %s",
                location,
                extra={
                    "bridge_event": "metadata.resolve.success",
                    "source_path": location,
                    "fields": sorted(record.to_payload()),
                    "elapsed_ms": elapsed_ms,
                },
            )
        return record

    def _read(self, handle: MetadataHandle) -> MetadataRecord:
        fields = _FieldAccumulator()

        duration_ms = duration_to_ms(handle.duration_seconds())

        fields.offer_all(handle.common_tags(), SourceRank.COMMON)
        fields.offer_all(handle.format_tags(), SourceRank.FORMAT)

        if not fields.has(TagField.YEAR):
            vendor = (c for c in handle.vendor_tags() if c.field in _VENDOR_FIELDS)
            fields.offer_all(vendor, SourceRank.VENDOR)

        return fields.build(duration_ms)

    def _release(self, handle: MetadataHandle, location: str) -> None:
        try:
            handle.close()
        except Exception as exc:
            logger.debug("Ignoring failure while closing %s: %s", location, exc)

    def _fault(self, location: str, stage: FaultStage, exc: Exception) -> ResolutionFault:
        fault = ResolutionFault(location=location, stage=stage, error=exc)
        logger.warning(
            "Could not read metadata from %s (%s): %s",
            location,
            stage,
            fault.message,
            extra={
                "bridge_event": "metadata.resolve.fault",
                "source_path": location,
                "stage": stage,
                "error_message": fault.message,
            },
        )
        return fault

    def _worker_executor(self) -> Executor:
        with self._executor_lock:
            if self._executor is None:
                self._executor = (
                    self._executor_factory()
                    if self._executor_factory
                    else ThreadPoolExecutor(
                        max_workers=self._max_workers, thread_name_prefix="metadata-resolver"
                    )
                )
            return self._executor

    def resolve_async(
        self,
        location: str | None,
        *,
        callback_executor: Executor | None = None,
    ) -> Future[MetadataRecord]:
        """Resolve on the worker pool; the returned future completes exactly once.

        When ``callback_executor`` is given, the future is completed from a
        task submitted to it, so done-callbacks run in that context. A
        callback executor that refuses the task completes the future inline.
        """
        completion: Future[MetadataRecord] = Future()

        def _deliver(record: MetadataRecord) -> None:
            if callback_executor is None:
                completion.set_result(record)
            else:
                try:
                    _ = callback_executor.submit(completion.set_result, record)
                except RuntimeError as exc:
                    logger.debug("Callback executor unavailable, completing inline: %s", exc)
                    completion.set_result(record)

        if location is None or not location.strip():
            _deliver(MetadataRecord.empty())
            return completion

        def _on_done(work: Future[MetadataRecord]) -> None:
            if work.cancelled() or work.exception() is not None:
                _deliver(MetadataRecord.empty())
            else:
                _deliver(work.result())

        work = self._worker_executor().submit(self.resolve, location)
        work.add_done_callback(_on_done)
        return completion

    def shutdown(self, *, wait: bool = False) -> None:
        """Shutdown the worker executor, if one was started."""
        with self._executor_lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=wait)
