"""Construction path: endpoints → health check → running exporter."""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from .config import SinkSettings
from .engine import BatchingExporter, DocumentSink
from .errors import ConfigurationError, ConnectivityError, DocumentSinkError


def connect(
    host: str,
    user: str,
    password: str,
    index: str,
    *,
    transport: httpx.BaseTransport | None = None,
    client: httpx.Client | None = None,
    flush_interval: float = 1.0,
    timeout: float = 15.0,
    max_pending: int | None = None,
    logger: structlog.BoundLogger | None = None,
) -> BatchingExporter:
    """Return a started exporter for ``index`` or raise without side effects.

    Raises :class:`~zincsink.errors.ConfigurationError` for a malformed ``host``
    or for passing both ``client`` and ``transport``, and
    :class:`~zincsink.errors.ConnectivityError` when the health check fails.
    A caller-supplied ``client`` is left open when the exporter closes.
    """

    logger = logger or structlog.get_logger("zincsink.client")
    sink = DocumentSink(
        host,
        user,
        password,
        index,
        client=client,
        transport=transport,
        timeout=timeout,
        logger=logger,
    )
    try:
        sink.health_check()
    except DocumentSinkError as exc:
        sink.close()
        logger.error("health_check_failed", url=sink.endpoints.health, error=str(exc))
        raise ConnectivityError(f"health check failed for {sink.endpoints.health}: {exc}") from exc
    logger.info("health_check_ok", url=sink.endpoints.health, index=index)
    try:
        return BatchingExporter(
            sink, flush_interval=flush_interval, max_pending=max_pending, logger=logger
        )
    except ConfigurationError:
        sink.close()
        raise


def connect_from_config(settings: SinkSettings, **overrides: Any) -> BatchingExporter:
    """Build an exporter from :class:`SinkSettings`; keyword overrides win."""

    options: dict[str, Any] = {
        "flush_interval": settings.flush_interval,
        "timeout": settings.timeout,
        "max_pending": settings.max_pending,
    }
    options.update(overrides)
    return connect(settings.host, settings.user, settings.password, settings.index, **options)


__all__ = ["connect", "connect_from_config"]
