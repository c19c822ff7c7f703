"""
Streaming ingestion of client flat files.
"""

from .accumulator import BatchAccumulator
from .committer import PersistenceCommitter
from .deduplicator import Deduplicator
from .pipeline import IngestionPipeline, RunCounters
from .trigger import PipelineTrigger

__all__ = [
    "BatchAccumulator",
    "Deduplicator",
    "PersistenceCommitter",
    "IngestionPipeline",
    "RunCounters",
    "PipelineTrigger",
]
