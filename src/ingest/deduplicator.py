"""
Two-pass deduplication of a batch by dni.

Pass 1 keeps the first occurrence of every dni inside the batch. Pass 2 asks
the repository which surviving keys are already persisted and drops them.
"""

import logging
from typing import Sequence

from src.core.models import ClientRecord, DedupResult
from src.observability.logger import get_logger
from src.warehouse.repository import ClientRepository


class Deduplicator:
    """
    Removes intra-batch and already-stored duplicates.
    """

    def __init__(self, repository: ClientRepository, logger: logging.Logger | None = None):
        """
        Initialize deduplicator.

        Args:
            repository: Storage used for the existing-key lookup
            logger: Logger for duplicate warnings
        """
        self.repository = repository
        self.logger = logger or get_logger(__name__)

    def dedupe(self, batch: Sequence[ClientRecord], batch_label: str = "batch") -> DedupResult:
        """
        Deduplicate one batch.

        Args:
            batch: Records in accumulation order
            batch_label: Human readable batch identifier for log messages

        Returns:
            DedupResult with surviving records and both duplicate counts

        Raises:
            Exception: Whatever the repository lookup raises
        """
        unique, internal_duplicates = self._drop_internal_duplicates(batch, batch_label)

        # Nothing left to look up
        if not unique:
            return DedupResult(keep=[], internal_duplicate_count=internal_duplicates)

        existing = set(self.repository.find_existing_dnis([r.dni for r in unique]))
        keep = [r for r in unique if r.dni not in existing]
        storage_duplicates = len(unique) - len(keep)

        if storage_duplicates > 0:
            self.logger.warning(
                f"Skipped {storage_duplicates} records whose DNI already exists in the database "
                f"in the {batch_label}",
                extra={"batch": batch_label, "storage_duplicates": storage_duplicates},
            )

        return DedupResult(
            keep=keep,
            internal_duplicate_count=internal_duplicates,
            storage_duplicate_count=storage_duplicates,
        )

    def _drop_internal_duplicates(
        self, batch: Sequence[ClientRecord], batch_label: str
    ) -> tuple[list[ClientRecord], int]:
        seen: set[int] = set()
        unique: list[ClientRecord] = []
        duplicates = 0

        for record in batch:
            if record.dni in seen:
                duplicates += 1
                self.logger.warning(
                    f"Duplicate DNI within the {batch_label}: {record.dni}",
                    extra={"batch": batch_label, "dni": record.dni},
                )
                continue
            seen.add(record.dni)
            unique.append(record)

        return unique, duplicates
