"""
Client file ingestion pipeline orchestration.

Coordinates the flow: read line → parse → accumulate → deduplicate → commit

Only a missing input file stops a run. Bad lines, duplicates and failed
saves are logged, counted, and the run goes on.
"""

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable
from uuid import uuid4

from src.core.config import PipelineConfig
from src.core.errors import InputFileNotFoundError
from src.core.models import BatchOutcome, ClientRecord, PipelineState, RunSummary, new_guid
from src.core.parsing import ClientLineParser
from src.observability.logger import get_logger, log_operation, run_context
from src.observability.metrics import MetricsCollector
from src.observability.resource_usage import ResourceSnapshot, ResourceTracker
from src.warehouse.repository import ClientRepository

from .accumulator import BatchAccumulator
from .committer import PersistenceCommitter
from .deduplicator import Deduplicator


@dataclass
class RunCounters:
    """Mutable counters of a single run, owned by the pipeline."""

    lines_read: int = 0
    blank_lines: int = 0
    processed: int = 0
    errors: int = 0
    rejected: int = 0
    internal_duplicates: int = 0
    storage_duplicates: int = 0
    failed_saves: int = 0
    batches: int = 0

    def fold(self, outcome: BatchOutcome) -> None:
        self.processed += outcome.processed
        self.errors += outcome.errors
        self.internal_duplicates += outcome.dedup.internal_duplicate_count
        self.storage_duplicates += outcome.dedup.storage_duplicate_count
        self.failed_saves += outcome.commit.failed_count


class IngestionPipeline:
    """
    Orchestrates one client file ingestion run.

    Flow:
    1. Check that the input file exists (the only fatal condition)
    2. Stream the file line by line, skipping blank lines
    3. Parse each line; rejected lines count as errors
    4. Flush every full batch through the deduplicator and the committer
    5. Flush the remaining partial batch
    6. Log and return a RunSummary
    """

    def __init__(
        self,
        repository: ClientRepository,
        config: PipelineConfig | None = None,
        logger: logging.Logger | None = None,
        metrics: MetricsCollector | None = None,
        parser: ClientLineParser | None = None,
        id_factory: Callable[[], str] = new_guid,
    ):
        """
        Initialize the pipeline.

        Args:
            repository: Client storage
            config: Pipeline settings (defaults apply when omitted)
            logger: Logger shared by all stages
            metrics: Prometheus metrics facade
            parser: Line parser; built from config and id_factory when omitted
            id_factory: guid generator for new records
        """
        self.repository = repository
        self.config = config or PipelineConfig()
        self.logger = logger or get_logger(__name__)
        self.metrics = metrics or MetricsCollector()
        self.parser = parser or ClientLineParser(
            delimiter=self.config.delimiter,
            id_factory=id_factory,
            logger=self.logger,
        )
        self.deduplicator = Deduplicator(repository, logger=self.logger)
        self.committer = PersistenceCommitter(repository, logger=self.logger)

        self.state = PipelineState.IDLE
        self.state_history: list[PipelineState] = [PipelineState.IDLE]

    def process_file(self, file_path: str | Path | None = None) -> RunSummary:
        """
        Run the pipeline over one file.

        Args:
            file_path: Input file; defaults to config.input_file

        Returns:
            RunSummary with the counters of this run

        Raises:
            InputFileNotFoundError: If the input file does not exist
        """
        path = Path(file_path or self.config.input_file)
        run_id = str(uuid4())
        counters = RunCounters()
        tracker = ResourceTracker()
        metrics = self.metrics.bind(str(path))

        with run_context(run_id=run_id, input_file=str(path)):
            self.state_history = []
            self._transition(PipelineState.IDLE)
            self.logger.info(f"Starting processing of file: {path}")

            self._validate_file(path, metrics)

            with log_operation("Streaming client file", logger=self.logger):
                accumulator = BatchAccumulator(self.config.batch_size)
                self._stream(path, accumulator, counters, tracker, metrics)
                self._finalize(accumulator, counters, metrics)

            snapshot = tracker.snapshot()
            self._transition(PipelineState.DONE)
            summary = self._build_summary(path, run_id, counters, snapshot)
            self._log_summary(summary)

        metrics.record_resources(snapshot.memory_mb, snapshot.cpu_user_ms, snapshot.cpu_system_ms)
        metrics.record_run(snapshot.elapsed_ms / 1000)
        return summary

    # =======================
    # STAGES
    # =======================

    def _validate_file(self, path: Path, metrics: MetricsCollector) -> None:
        self._transition(PipelineState.VALIDATING_FILE)
        if not path.is_file():
            self._transition(PipelineState.FAILED)
            self.logger.error(f"Input file does not exist: {path}", extra={"input_file": str(path)})
            metrics.record_run(0.0, success=False)
            raise InputFileNotFoundError(str(path))

    def _stream(
        self,
        path: Path,
        accumulator: BatchAccumulator,
        counters: RunCounters,
        tracker: ResourceTracker,
        metrics: MetricsCollector,
    ) -> None:
        self._transition(PipelineState.STREAMING)

        with open(path, encoding=self.config.encoding, errors="replace") as f:
            for line_number, line in enumerate(f, start=1):
                counters.lines_read = line_number
                metrics.record_lines_read()

                if line.strip() == "":
                    counters.blank_lines += 1
                    continue

                try:
                    record = self._parse(line, line_number, counters, metrics)
                    if record is None:
                        continue

                    accumulator.add(record)
                    if self.state is not PipelineState.ACCUMULATING:
                        self._transition(PipelineState.ACCUMULATING)
                except Exception as e:
                    self.logger.error(
                        f"Unexpected error processing line {line_number}: {e}",
                        extra={"line_number": line_number},
                        exc_info=True,
                    )
                    counters.errors += 1
                    metrics.record_line_error()
                    continue

                # Batch failures are counted inside _flush, never per line
                if accumulator.is_full():
                    self._flush(accumulator.drain(), f"batch at line {line_number}", counters, metrics)
                    if self.config.progress_every_batch:
                        self._report_progress(counters, tracker)
                    self._transition(PipelineState.STREAMING)

    def _parse(
        self, line: str, line_number: int, counters: RunCounters, metrics: MetricsCollector
    ) -> ClientRecord | None:
        result = self.parser.parse(line, line_number)
        if not result.ok:
            counters.rejected += 1
            counters.errors += 1
            metrics.record_rejected_line()
            return None
        return result.record

    def _finalize(self, accumulator: BatchAccumulator, counters: RunCounters, metrics: MetricsCollector) -> None:
        self._transition(PipelineState.FINALIZING)
        if accumulator:
            self._flush(accumulator.drain(), "final batch", counters, metrics)

    def _flush(
        self,
        records: list[ClientRecord],
        batch_label: str,
        counters: RunCounters,
        metrics: MetricsCollector,
    ) -> BatchOutcome | None:
        """
        Deduplicate and persist one drained batch.

        If either stage raises, every record of the batch counts as an error.
        """
        previous_state = self.state
        self._transition(PipelineState.FLUSHING)
        counters.batches += 1
        started = time.perf_counter()

        try:
            dedup = self.deduplicator.dedupe(records, batch_label)
            commit = self.committer.commit(dedup.keep, batch_label)
        except Exception as e:
            self.logger.error(
                f"Unexpected error processing the {batch_label}: {e}",
                extra={"batch": batch_label, "batch_size": len(records)},
                exc_info=True,
            )
            counters.errors += len(records)
            metrics.record_failed_batch(len(records), time.perf_counter() - started)
            self._transition(previous_state)
            return None

        outcome = BatchOutcome(batch_size=len(records), dedup=dedup, commit=commit)
        counters.fold(outcome)
        metrics.record_batch(
            record_count=len(records),
            persisted=commit.persisted_count,
            failed=commit.failed_count,
            internal_duplicates=dedup.internal_duplicate_count,
            storage_duplicates=dedup.storage_duplicate_count,
            constraint_duplicates=commit.duplicate_key_count,
            used_fallback=commit.used_fallback,
            duration_seconds=time.perf_counter() - started,
        )
        self._transition(previous_state)
        return outcome

    # =======================
    # REPORTING
    # =======================

    def _transition(self, state: PipelineState) -> None:
        self.state = state
        self.state_history.append(state)
        self.logger.debug(f"Pipeline state: {state.value}", extra={"state": state.value})

    def _report_progress(self, counters: RunCounters, tracker: ResourceTracker) -> None:
        """Log a progress line; a failure here never affects the counters."""
        try:
            self._log_progress(counters, tracker.snapshot())
        except Exception as e:
            self.logger.warning(f"Could not report progress: {e}", exc_info=True)

    def _log_progress(self, counters: RunCounters, snapshot: ResourceSnapshot) -> None:
        fields = snapshot.as_log_fields()
        self.logger.info(
            f"[Metrics] Lines: {counters.lines_read} | Processed: {counters.processed} | "
            f"Errors: {counters.errors} | Time: {fields['elapsed_ms']}ms | "
            f"Memory: {fields['memory_mb']} MB | "
            f"CPU (User/System): {fields['cpu_user_ms']}ms/{fields['cpu_system_ms']}ms",
            extra={
                "lines_read": counters.lines_read,
                "processed_records": counters.processed,
                "error_records": counters.errors,
                **fields,
            },
        )

    def _build_summary(
        self, path: Path, run_id: str, counters: RunCounters, snapshot: ResourceSnapshot
    ) -> RunSummary:
        return RunSummary(
            input_file=str(path),
            run_id=run_id,
            total_lines=counters.lines_read,
            blank_lines=counters.blank_lines,
            processed_records=counters.processed,
            error_records=counters.errors,
            rejected_lines=counters.rejected,
            internal_duplicates=counters.internal_duplicates,
            storage_duplicates=counters.storage_duplicates,
            failed_saves=counters.failed_saves,
            batches_flushed=counters.batches,
            elapsed_ms=snapshot.elapsed_ms,
            memory_mb=snapshot.memory_mb,
            cpu_user_ms=snapshot.cpu_user_ms,
            cpu_system_ms=snapshot.cpu_system_ms,
            state=self.state,
        )

    def _log_summary(self, summary: RunSummary) -> None:
        self.logger.info(
            "--- Final Summary --- "
            f"Lines read: {summary.total_lines} | "
            f"Records processed: {summary.processed_records} | "
            f"Records with errors: {summary.error_records} | "
            f"Total time: {summary.elapsed_ms:.2f}ms | "
            f"Memory: {summary.memory_mb:.2f} MB | "
            f"CPU (User/System): {summary.cpu_user_ms:.2f}ms/{summary.cpu_system_ms:.2f}ms",
            extra={"summary": summary.model_dump(mode="json")},
        )
