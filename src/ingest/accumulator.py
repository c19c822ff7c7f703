"""
Fixed-size batch accumulation.
"""

from src.core.models import ClientRecord


class BatchAccumulator:
    """
    Collects parsed records until the configured batch size is reached.

    Records keep their insertion order; no filtering happens here.
    """

    def __init__(self, batch_size: int):
        if batch_size < 1:
            raise ValueError(f"batch_size must be at least 1, got {batch_size}")
        self.batch_size = batch_size
        self._records: list[ClientRecord] = []

    def add(self, record: ClientRecord) -> None:
        self._records.append(record)

    def is_full(self) -> bool:
        return len(self._records) >= self.batch_size

    def drain(self) -> list[ClientRecord]:
        """Return the buffered records and start a new empty batch."""
        drained, self._records = self._records, []
        return drained

    def __len__(self) -> int:
        return len(self._records)

    def __bool__(self) -> bool:
        return bool(self._records)
