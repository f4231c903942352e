"""Record writer contract."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable


class RecordWriter(ABC):
    """Uniform writer contract for JSON document outputs."""

    @abstractmethod
    def write(self, data: bytes) -> int:
        """Accept a single JSON document and return the number of bytes taken."""

    def write_many(self, records: Iterable[bytes]) -> int:
        return sum(self.write(record) for record in records)

    @abstractmethod
    def flush(self) -> None:
        """Push buffered records to the destination."""

    @abstractmethod
    def close(self) -> None:
        """Drain buffered records and release underlying resources."""

    def __enter__(self) -> "RecordWriter":
        return self

    def __exit__(self, *_exc) -> None:
        self.close()


__all__ = ["RecordWriter"]
