"""
Per-batch results produced by the deduplicator and the persistence committer.
"""

from typing import List

from pydantic import BaseModel, Field, model_validator

from .client_record import ClientRecord


class DedupResult(BaseModel):
    """
    Outcome of the two deduplication passes over one batch.

    Attributes:
        keep: Surviving records, in original batch order
        internal_duplicate_count: Records dropped because their dni repeated in the batch
        storage_duplicate_count: Records dropped because their dni is already persisted
    """

    keep: List[ClientRecord] = Field(default_factory=list)
    internal_duplicate_count: int = Field(0, ge=0)
    storage_duplicate_count: int = Field(0, ge=0)

    @property
    def duplicate_count(self) -> int:
        return self.internal_duplicate_count + self.storage_duplicate_count


class CommitResult(BaseModel):
    """
    Outcome of persisting one deduplicated batch.

    Attributes:
        persisted_count: Records durably saved
        failed_count: Records that could not be saved (any cause)
        duplicate_key_count: Subset of failed_count rejected by the dni uniqueness constraint
        used_fallback: Whether the bulk save failed and rows were saved one by one
    """

    persisted_count: int = Field(0, ge=0)
    failed_count: int = Field(0, ge=0)
    duplicate_key_count: int = Field(0, ge=0)
    used_fallback: bool = False

    @model_validator(mode="after")
    def check_duplicates_within_failures(self):
        """duplicate_key_count is a subset of failed_count."""
        if self.duplicate_key_count > self.failed_count:
            raise ValueError("duplicate_key_count cannot exceed failed_count")
        return self


class BatchOutcome(BaseModel):
    """Fold of one flush cycle into run counters."""

    batch_size: int = Field(0, ge=0)
    dedup: DedupResult = Field(default_factory=DedupResult)
    commit: CommitResult = Field(default_factory=CommitResult)

    @property
    def processed(self) -> int:
        return self.commit.persisted_count

    @property
    def errors(self) -> int:
        return self.dedup.duplicate_count + self.commit.failed_count
