"""
Bulk persistence with row-level fallback.

One save_many call per batch. If it fails, every record is saved on its own
so a single bad row cannot sink the rest of the batch. Failures never leave
this module; only counts do.
"""

import logging
from typing import Sequence

from src.core.errors import DuplicateKeyError
from src.core.models import ClientRecord, CommitResult
from src.observability.logger import get_logger
from src.warehouse.repository import ClientRepository


class PersistenceCommitter:
    """
    Persists deduplicated batches through a ClientRepository.
    """

    def __init__(self, repository: ClientRepository, logger: logging.Logger | None = None):
        self.repository = repository
        self.logger = logger or get_logger(__name__)

    def commit(self, records: Sequence[ClientRecord], batch_label: str = "batch") -> CommitResult:
        """
        Save a batch, falling back to single-row saves on bulk failure.

        Args:
            records: Deduplicated records to persist
            batch_label: Human readable batch identifier for log messages

        Returns:
            CommitResult where persisted_count + failed_count == len(records)
        """
        if not records:
            return CommitResult()

        try:
            self.repository.save_many(records)
            return CommitResult(persisted_count=len(records))
        except Exception as e:
            self.logger.warning(
                f"Bulk save of {len(records)} records failed in the {batch_label}, "
                f"retrying one by one: {e}",
                extra={
                    "batch": batch_label,
                    "batch_size": len(records),
                    "error_type": type(e).__name__,
                },
            )

        return self._commit_one_by_one(records, batch_label)

    def _commit_one_by_one(self, records: Sequence[ClientRecord], batch_label: str) -> CommitResult:
        persisted = 0
        failed = 0
        duplicate_keys = 0

        for record in records:
            try:
                self.repository.save(record)
                persisted += 1
            except DuplicateKeyError as e:
                failed += 1
                duplicate_keys += 1
                self.logger.warning(
                    f"Duplicate DNI {record.dni} in the {batch_label}, record skipped",
                    extra={"batch": batch_label, "dni": record.dni, "error_message": str(e)},
                )
            except Exception as e:
                failed += 1
                self.logger.error(
                    f"Failed to save client with DNI {record.dni} in the {batch_label}: {e}",
                    extra={
                        "batch": batch_label,
                        "dni": record.dni,
                        "error_type": type(e).__name__,
                    },
                    exc_info=True,
                )

        return CommitResult(
            persisted_count=persisted,
            failed_count=failed,
            duplicate_key_count=duplicate_keys,
            used_fallback=True,
        )
