"""Engine components: document sink → batching exporter."""

from .exporter import BatchingExporter, ExporterState, ExporterStats, RecordWriter
from .sink import DocumentSink, SinkEndpoints, build_bulk_body, build_endpoints

__all__ = [
    "BatchingExporter",
    "DocumentSink",
    "ExporterState",
    "ExporterStats",
    "RecordWriter",
    "SinkEndpoints",
    "build_bulk_body",
    "build_endpoints",
]
