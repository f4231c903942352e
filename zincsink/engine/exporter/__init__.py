"""Record writer SPI and the batching exporter."""

from .base import RecordWriter
from .batching import BatchingExporter, ExporterState, ExporterStats

__all__ = ["BatchingExporter", "ExporterState", "ExporterStats", "RecordWriter"]
