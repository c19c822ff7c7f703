"""
RunSummary model returned by one pipeline run.
"""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field


class PipelineState(str, Enum):
    """Lifecycle states of one ingestion run."""

    IDLE = "idle"
    VALIDATING_FILE = "validating_file"
    STREAMING = "streaming"
    ACCUMULATING = "accumulating"
    FLUSHING = "flushing"
    FINALIZING = "finalizing"
    DONE = "done"
    FAILED = "failed"


class RunSummary(BaseModel):
    """
    Final counters of one ingestion run.

    Attributes:
        input_file: Path of the processed file
        run_id: Identifier bound to every log line of the run
        total_lines: Physical lines read, blank lines included
        blank_lines: Lines skipped because they were empty
        processed_records: Records persisted
        error_records: Rejected lines + duplicates + failed saves + lines that raised
        rejected_lines: Lines that failed field validation
        internal_duplicates: Records dropped by the intra-batch pass
        storage_duplicates: Records dropped because their dni was already stored
        failed_saves: Records that could not be saved
        batches_flushed: Number of flush cycles, including the final one
        elapsed_ms: Wall clock duration of the run
        memory_mb: Resident memory at the end of the run
        cpu_user_ms: User CPU time consumed by the run
        cpu_system_ms: System CPU time consumed by the run
        started_at: UTC start time
        state: Final pipeline state
    """

    input_file: str
    run_id: str | None = None
    total_lines: int = Field(0, ge=0)
    blank_lines: int = Field(0, ge=0)
    processed_records: int = Field(0, ge=0)
    error_records: int = Field(0, ge=0)
    rejected_lines: int = Field(0, ge=0)
    internal_duplicates: int = Field(0, ge=0)
    storage_duplicates: int = Field(0, ge=0)
    failed_saves: int = Field(0, ge=0)
    batches_flushed: int = Field(0, ge=0)
    elapsed_ms: float = Field(0.0, ge=0.0)
    memory_mb: float = Field(0.0, ge=0.0)
    cpu_user_ms: float = Field(0.0, ge=0.0)
    cpu_system_ms: float = Field(0.0, ge=0.0)
    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    state: PipelineState = PipelineState.DONE
