"""Buffered JSON document exporter for ZincSearch."""

from .client import connect, connect_from_config
from .config import SinkSettings
from .engine import BatchingExporter, DocumentSink, ExporterState, ExporterStats
from .errors import (
    ConfigurationError,
    ConnectivityError,
    DocumentSinkError,
    ExporterClosedError,
    FlushError,
    ZincSinkError,
)

__version__ = "0.1.0"

__all__ = [
    "BatchingExporter",
    "ConfigurationError",
    "ConnectivityError",
    "DocumentSink",
    "DocumentSinkError",
    "ExporterClosedError",
    "ExporterState",
    "ExporterStats",
    "FlushError",
    "SinkSettings",
    "ZincSinkError",
    "__version__",
    "connect",
    "connect_from_config",
]
