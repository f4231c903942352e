"""Exception hierarchy shared by the sink, the exporter and the CLI."""

from __future__ import annotations


class ZincSinkError(Exception):
    """Base class for every error raised by zincsink."""


class ConfigurationError(ZincSinkError, ValueError):
    """Malformed base address, index name or settings."""


class ConnectivityError(ZincSinkError):
    """Health check failed while constructing an exporter."""


class DocumentSinkError(ZincSinkError):
    """A request to the document index failed.

    ``status_code`` is set when the backend answered with a non-200 status and
    left as ``None`` for transport failures.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class FlushError(DocumentSinkError):
    """An explicitly requested flush could not be delivered."""


class ExporterClosedError(ZincSinkError):
    """Write or flush attempted after close was signalled."""

    def __init__(self, message: str = "exporter closed") -> None:
        super().__init__(message)


__all__ = [
    "ConfigurationError",
    "ConnectivityError",
    "DocumentSinkError",
    "ExporterClosedError",
    "FlushError",
    "ZincSinkError",
]
