"""
Fire-and-forget trigger for ingestion runs.

start() hands the run to a background thread and returns at once. Runs are
serialized: while one is in progress, further start() calls are refused, so
two runs never race between the existing-key lookup and the insert.
"""

import logging
import threading
from pathlib import Path
from typing import Callable

from src.core.models import RunSummary
from src.observability.logger import get_logger
from src.observability.metrics import MetricsCollector

from .pipeline import IngestionPipeline


class PipelineTrigger:
    """
    Starts pipeline runs in the background, one at a time.

    Usage:
        trigger = PipelineTrigger(lambda: IngestionPipeline(repository, config))
        accepted = trigger.start()
    """

    def __init__(
        self,
        pipeline_factory: Callable[[], IngestionPipeline],
        logger: logging.Logger | None = None,
        metrics: MetricsCollector | None = None,
    ):
        """
        Initialize trigger.

        Args:
            pipeline_factory: Builds a fresh pipeline for every run
            logger: Logger for trigger events
            metrics: Metrics facade used to count refused runs
        """
        self.pipeline_factory = pipeline_factory
        self.logger = logger or get_logger(__name__)
        self.metrics = metrics or MetricsCollector()

        self._run_lock = threading.Lock()
        self._thread: threading.Thread | None = None
        self.last_summary: RunSummary | None = None
        self.last_error: BaseException | None = None

    @property
    def is_running(self) -> bool:
        return self._run_lock.locked()

    def start(self, file_path: str | Path | None = None) -> bool:
        """
        Start a run in a background thread.

        Args:
            file_path: Input file; the pipeline default applies when omitted

        Returns:
            True if the run was started, False if another run is in progress
        """
        if not self._run_lock.acquire(blocking=False):
            self.logger.warning(
                "Ingestion run already in progress, trigger ignored",
                extra={"input_file": str(file_path) if file_path else None},
            )
            self.metrics.record_run_rejected()
            return False

        self.last_summary = None
        self.last_error = None
        self._thread = threading.Thread(
            target=self._run,
            args=(file_path,),
            name="client-ingest-run",
            daemon=True,
        )
        try:
            self._thread.start()
        except Exception:
            self._run_lock.release()
            raise

        self.logger.info("Ingestion run started", extra={"input_file": str(file_path) if file_path else None})
        return True

    def wait(self, timeout: float | None = None) -> bool:
        """
        Block until the current run finishes.

        Returns:
            True if no run is active when this returns
        """
        thread = self._thread
        if thread is not None:
            thread.join(timeout)
            return not thread.is_alive()
        return True

    def _run(self, file_path: str | Path | None) -> None:
        try:
            self.last_summary = self.pipeline_factory().process_file(file_path)
        except Exception as e:
            # Nobody awaits the background thread; keep the error for inspection
            self.last_error = e
            self.logger.error(f"Ingestion run failed: {e}", exc_info=True)
        finally:
            self._run_lock.release()
