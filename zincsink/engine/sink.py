"""HTTP document sink talking to the ZincSearch document API."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Sequence

import httpx
import structlog

from ..errors import ConfigurationError, DocumentSinkError

JSON_HEADERS = {"Content-Type": "application/json"}


@dataclass(slots=True, frozen=True)
class SinkEndpoints:
    """Pre-built endpoint URLs for one index."""

    single: str
    bulk: str
    health: str


def _join(base: httpx.URL, *parts: str) -> str:
    segments = [base.path.rstrip("/")]
    segments.extend(part.strip("/") for part in parts)
    return str(base.copy_with(path="/".join(segments)))


def build_endpoints(host: str, index: str) -> SinkEndpoints:
    """Resolve single, bulk and health URLs from a base address."""

    if not index or not index.strip():
        raise ConfigurationError("index name cannot be empty")
    try:
        base = httpx.URL(host)
    except (httpx.InvalidURL, TypeError) as exc:
        raise ConfigurationError(f"invalid base address {host!r}: {exc}") from exc
    if base.scheme not in ("http", "https") or not base.host:
        raise ConfigurationError(f"base address must be an absolute http(s) URL: {host!r}")
    return SinkEndpoints(
        single=_join(base, "api", index, "_doc"),
        bulk=_join(base, "api", "_bulkv2"),
        health=_join(base, "healthz"),
    )


def build_bulk_body(index: str, records: Sequence[bytes]) -> bytes:
    """Splice raw JSON records into a ``_bulkv2`` request body.

    Records are concatenated verbatim, each must already be a JSON object.
    """

    head = b'{"index":' + json.dumps(index).encode("utf-8") + b',"records":['
    return head + b",".join(records) + b"]}"


class DocumentSink:
    """Stateless single/bulk document submission with basic auth."""

    def __init__(
        self,
        host: str,
        user: str,
        password: str,
        index: str,
        *,
        client: httpx.Client | None = None,
        transport: httpx.BaseTransport | None = None,
        timeout: float = 15.0,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        if client is not None and transport is not None:
            raise ConfigurationError("pass either client or transport, not both")
        self.index = index
        self.endpoints = build_endpoints(host, index)
        self.logger = logger or structlog.get_logger("zincsink.sink")
        self._auth = httpx.BasicAuth(user, password)
        self._owns_client = client is None
        self._client = client or httpx.Client(transport=transport, timeout=timeout)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def submit_one(self, record: bytes) -> None:
        self._post(self.endpoints.single, record)

    def submit_many(self, records: Sequence[bytes]) -> None:
        if not records:
            raise ValueError("submit_many requires at least one record")
        self._post(self.endpoints.bulk, build_bulk_body(self.index, records))

    def health_check(self) -> None:
        """GET the health endpoint, raising unless the backend answers 200."""

        self._send("GET", self.endpoints.health)

    # ------------------------------------------------------------------
    def _post(self, url: str, body: bytes) -> None:
        self._send("POST", url, content=body, headers=JSON_HEADERS, auth=self._auth)

    def _send(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            response = self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            self.logger.debug("request_error", method=method, url=url, error=str(exc))
            raise DocumentSinkError(f"{method} {url} failed: {exc}") from exc
        if response.status_code != httpx.codes.OK:
            raise DocumentSinkError(
                f"not 200 response code: {response.status_code}",
                status_code=response.status_code,
            )
        return response


__all__ = ["DocumentSink", "SinkEndpoints", "build_bulk_body", "build_endpoints"]
