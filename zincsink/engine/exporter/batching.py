"""Buffered exporter coalescing writes into periodic sink submissions."""

from __future__ import annotations

import time
from dataclasses import asdict, dataclass, field
from enum import Enum
from queue import Empty, Queue
from threading import Event, Lock, Thread
from typing import Any

import structlog

from ...errors import ConfigurationError, DocumentSinkError, ExporterClosedError, FlushError
from ..sink import DocumentSink
from .base import RecordWriter


class ExporterState(str, Enum):
    """Lifecycle of a batching exporter."""

    OPEN = "open"
    CLOSING = "closing"
    CLOSED = "closed"


@dataclass(slots=True)
class ExporterStats:
    records_accepted: int = 0
    batches_sent: int = 0
    records_sent: int = 0
    flush_failures: int = 0

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


@dataclass(slots=True)
class _FlushRequest:
    done: Event = field(default_factory=Event)
    error: DocumentSinkError | None = None


_SHUTDOWN = object()


class BatchingExporter(RecordWriter):
    """Accumulate JSON records and forward them to a :class:`DocumentSink`.

    A single worker thread owns the pending batch. Producers hand records over
    through a one-slot queue, so a producer blocks while the worker is busy
    talking to the backend. Every ``flush_interval`` seconds the worker submits
    whatever is buffered: one record goes through ``submit_one``, two or more
    through ``submit_many``. A failed submission keeps the batch for the next
    tick; there is no other retry.

    ``close`` is synchronous: it returns once the worker has attempted the final
    drain, then closes the sink. A failure of that drain is logged and kept in
    ``last_error``.
    """

    def __init__(
        self,
        sink: DocumentSink,
        *,
        flush_interval: float = 1.0,
        max_pending: int | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        if flush_interval <= 0:
            raise ConfigurationError("flush_interval must be > 0")
        if max_pending is not None and max_pending < 1:
            raise ConfigurationError("max_pending must be >= 1")
        self.sink = sink
        self.flush_interval = flush_interval
        self.max_pending = max_pending
        self.logger = logger or structlog.get_logger("zincsink.exporter")
        self.stats = ExporterStats()
        self.last_error: DocumentSinkError | None = None
        self._state = ExporterState.OPEN
        self._state_lock = Lock()
        self._inbox: Queue[Any] = Queue(maxsize=1)
        self._worker = Thread(target=self._run, name="zincsink-exporter", daemon=True)
        self._worker.start()
        self.logger.info(
            "exporter_started",
            index=getattr(sink, "index", None),
            flush_interval=flush_interval,
            max_pending=max_pending,
        )

    @property
    def state(self) -> ExporterState:
        return self._state

    def write(self, data: bytes) -> int:
        record = memoryview(data).tobytes()
        # Holding the lock across the handoff keeps acceptance order equal to
        # buffer order and keeps writes from landing behind the shutdown signal.
        with self._state_lock:
            if self._state is not ExporterState.OPEN:
                raise ExporterClosedError()
            self._inbox.put(record)
            self.stats.records_accepted += 1
        return len(record)

    def flush(self, timeout: float | None = None) -> None:
        """Submit the pending batch now and wait for the outcome."""

        request = _FlushRequest()
        with self._state_lock:
            if self._state is not ExporterState.OPEN:
                raise ExporterClosedError()
            self._inbox.put(request)
        if not request.done.wait(timeout):
            raise FlushError(f"flush not completed within {timeout}s")
        if request.error is not None:
            raise FlushError(str(request.error), status_code=request.error.status_code) from request.error

    def close(self) -> None:
        with self._state_lock:
            if self._state is not ExporterState.OPEN:
                self.logger.warning("close_ignored", state=self._state.value)
                return
            self._state = ExporterState.CLOSING
            self._inbox.put(_SHUTDOWN)
        self._worker.join()
        self.sink.close()
        self._state = ExporterState.CLOSED
        self.logger.info("exporter_closed", **self.stats.as_dict())

    # ------------------------------------------------------------------
    def _run(self) -> None:
        buffer: list[bytes] = []
        next_tick = time.monotonic() + self.flush_interval
        try:
            while True:
                try:
                    item = self._inbox.get(timeout=max(0.0, next_tick - time.monotonic()))
                except Empty:
                    item = None

                if item is _SHUTDOWN:
                    return
                if isinstance(item, _FlushRequest):
                    item.error = self._deliver(buffer, trigger="request")
                    if item.error is None:
                        buffer = []
                    item.done.set()
                    continue
                if item is not None:
                    buffer.append(item)
                    # A failed size flush is retried at the next tick or the next multiple.
                    if self.max_pending and len(buffer) % self.max_pending == 0:
                        if self._deliver(buffer, trigger="size") is None:
                            buffer = []

                now = time.monotonic()
                if now < next_tick:
                    continue
                if self._deliver(buffer, trigger="tick") is None:
                    buffer = []
                next_tick += self.flush_interval
                now = time.monotonic()
                if next_tick <= now:
                    next_tick = now + self.flush_interval
        finally:
            error = self._deliver(buffer, trigger="shutdown")
            if error is not None:
                self.last_error = error
                self.logger.error("shutdown_flush_failed", records=len(buffer), error=str(error))

    def _deliver(self, batch: list[bytes], trigger: str) -> DocumentSinkError | None:
        """Apply the flush policy to ``batch`` and report the failure, if any."""

        count = len(batch)
        if count == 0:
            return None
        try:
            if count == 1:
                self.sink.submit_one(batch[0])
            else:
                self.sink.submit_many(batch)
        except DocumentSinkError as exc:
            self.stats.flush_failures += 1
            self.logger.warning(
                "flush_failed",
                trigger=trigger,
                records=count,
                status_code=exc.status_code,
                error=str(exc),
            )
            return exc
        except Exception as exc:  # noqa: BLE001
            self.stats.flush_failures += 1
            self.logger.exception("flush_crashed", trigger=trigger, records=count)
            return DocumentSinkError(f"sink raised {type(exc).__name__}: {exc}")
        self.stats.batches_sent += 1
        self.stats.records_sent += count
        self.logger.debug("flush_ok", trigger=trigger, records=count)
        return None


__all__ = ["BatchingExporter", "ExporterState", "ExporterStats"]
