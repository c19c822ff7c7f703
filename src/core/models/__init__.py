"""
Core data models for the client ingestion pipeline.

All models use Pydantic for runtime validation and type safety.
"""

from .batch_outcome import BatchOutcome, CommitResult, DedupResult
from .client_record import ClientRecord, new_guid
from .parse_result import ParsedLine, ParseResult, RejectedLine
from .run_summary import PipelineState, RunSummary

__all__ = [
    "ClientRecord",
    "new_guid",
    "ParsedLine",
    "RejectedLine",
    "ParseResult",
    "DedupResult",
    "CommitResult",
    "BatchOutcome",
    "PipelineState",
    "RunSummary",
]
