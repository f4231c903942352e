"""Shared fixtures: an in-process fake ZincSearch backend and recording sinks."""

from __future__ import annotations

import os
import time
from threading import Lock
from typing import Callable, Iterator, Sequence

import httpx
import pytest

from zincsink import BatchingExporter, connect
from zincsink.errors import DocumentSinkError

ZINC_HOST = "http://zinc.test:4080"
ZINC_INDEX = "metrics"


class FakeZinc:
    """MockTransport handler recording every request it receives."""

    def __init__(self) -> None:
        self.health_status = 200
        self.write_statuses: list[int] = []
        self._requests: list[httpx.Request] = []
        self._lock = Lock()

    def handler(self, request: httpx.Request) -> httpx.Response:
        request.read()
        with self._lock:
            self._requests.append(request)
            if request.url.path == "/healthz":
                return httpx.Response(self.health_status, json={"status": "ok"})
            status = self.write_statuses.pop(0) if self.write_statuses else 200
        return httpx.Response(status, json={"message": "ok" if status == 200 else "error"})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def requests(self) -> list[httpx.Request]:
        with self._lock:
            return list(self._requests)

    @property
    def writes(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == "POST"]

    @property
    def singles(self) -> list[httpx.Request]:
        return [r for r in self.writes if r.url.path.endswith("/_doc")]

    @property
    def bulks(self) -> list[httpx.Request]:
        return [r for r in self.writes if r.url.path == "/api/_bulkv2"]


class RecordingSink:
    """Stand-in for DocumentSink that records calls and can fail on demand."""

    index = ZINC_INDEX

    def __init__(self, failures: int = 0) -> None:
        self.failures = failures
        self.calls: list[tuple[str, list[bytes]]] = []
        self.closed = False
        self._lock = Lock()

    def _record(self, kind: str, records: Sequence[bytes]) -> None:
        with self._lock:
            self.calls.append((kind, list(records)))
            if self.failures > 0:
                self.failures -= 1
                raise DocumentSinkError("not 200 response code: 503", status_code=503)

    def submit_one(self, record: bytes) -> None:
        self._record("one", [record])

    def submit_many(self, records: Sequence[bytes]) -> None:
        self._record("many", records)

    def close(self) -> None:
        self.closed = True

    def snapshot(self) -> list[tuple[str, list[bytes]]]:
        with self._lock:
            return list(self.calls)


class RecordingLogger:
    """Minimal structlog-compatible logger capturing event names."""

    def __init__(self) -> None:
        self.events: list[tuple[str, str, dict]] = []

    def _log(self, level: str, event: str, **kw) -> None:
        self.events.append((level, event, kw))

    def debug(self, event: str, **kw) -> None:
        self._log("debug", event, **kw)

    def info(self, event: str, **kw) -> None:
        self._log("info", event, **kw)

    def warning(self, event: str, **kw) -> None:
        self._log("warning", event, **kw)

    def error(self, event: str, **kw) -> None:
        self._log("error", event, **kw)

    def exception(self, event: str, **kw) -> None:
        self._log("exception", event, **kw)

    def names(self, level: str | None = None) -> list[str]:
        return [event for lvl, event, _ in self.events if level is None or lvl == level]


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in list(os.environ):
        if key.startswith("ZINCSINK_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def zinc() -> FakeZinc:
    return FakeZinc()


@pytest.fixture
def recording_sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def recording_logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def wait_until() -> Callable[..., bool]:
    def _wait(predicate: Callable[[], bool], timeout: float = 3.0, interval: float = 0.005) -> bool:
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            if predicate():
                return True
            time.sleep(interval)
        return predicate()

    return _wait


@pytest.fixture
def make_exporter() -> Iterator[Callable[..., BatchingExporter]]:
    created: list[BatchingExporter] = []

    def _builder(sink, **kwargs) -> BatchingExporter:
        kwargs.setdefault("flush_interval", 60.0)
        exporter = BatchingExporter(sink, **kwargs)
        created.append(exporter)
        return exporter

    yield _builder
    for exporter in created:
        exporter.close()


@pytest.fixture
def connected(zinc: FakeZinc) -> Iterator[Callable[..., BatchingExporter]]:
    created: list[BatchingExporter] = []

    def _builder(**kwargs) -> BatchingExporter:
        kwargs.setdefault("transport", zinc.transport)
        exporter = connect(ZINC_HOST, "admin", "secret", ZINC_INDEX, **kwargs)
        created.append(exporter)
        return exporter

    yield _builder
    for exporter in created:
        exporter.close()


@pytest.fixture
def sink_class() -> type[RecordingSink]:
    return RecordingSink
