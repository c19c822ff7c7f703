"""
Unit tests for PipelineTrigger background runs.
"""

import threading
from unittest.mock import MagicMock

from src.core.errors import InputFileNotFoundError
from src.core.models import RunSummary
from src.ingest.trigger import PipelineTrigger
from src.observability.metrics import MetricsCollector, REGISTRY


class BlockingPipeline:
    """Pipeline double that holds the run open until released."""

    def __init__(self):
        self.started = threading.Event()
        self.release = threading.Event()
        self.calls = []

    def process_file(self, file_path=None):
        self.calls.append(file_path)
        self.started.set()
        self.release.wait(timeout=5)
        return RunSummary(input_file=str(file_path), processed_records=1)


class TestPipelineTrigger:
    """Tests for PipelineTrigger"""

    def test_start_returns_immediately_and_runs_in_background(self, logger):
        pipeline = BlockingPipeline()
        trigger = PipelineTrigger(lambda: pipeline, logger=logger)

        assert trigger.start("clients.dat") is True
        assert pipeline.started.wait(timeout=5)
        assert trigger.is_running

        pipeline.release.set()
        assert trigger.wait(timeout=5)

        assert not trigger.is_running
        assert pipeline.calls == ["clients.dat"]
        assert trigger.last_summary.processed_records == 1
        assert trigger.last_error is None

    def test_overlapping_start_is_refused(self, logger):
        pipeline = BlockingPipeline()
        trigger = PipelineTrigger(lambda: pipeline, logger=logger)
        rejected_before = REGISTRY.get_sample_value("ingest_runs_total", {"status": "rejected"}) or 0

        assert trigger.start("clients.dat")
        assert pipeline.started.wait(timeout=5)
        assert trigger.start("clients.dat") is False

        pipeline.release.set()
        trigger.wait(timeout=5)

        assert pipeline.calls == ["clients.dat"]
        assert "already in progress" in logger.warning.call_args.args[0]
        assert REGISTRY.get_sample_value("ingest_runs_total", {"status": "rejected"}) == rejected_before + 1

    def test_new_run_accepted_after_previous_finishes(self, logger):
        factory = MagicMock()
        factory.return_value.process_file.return_value = RunSummary(input_file="a.dat")
        trigger = PipelineTrigger(factory, logger=logger, metrics=MetricsCollector())

        assert trigger.start("a.dat")
        trigger.wait(timeout=5)
        assert trigger.start("b.dat")
        trigger.wait(timeout=5)

        # A fresh pipeline for every run
        assert factory.call_count == 2

    def test_failed_run_is_kept_for_inspection(self, logger):
        factory = MagicMock()
        factory.return_value.process_file.side_effect = InputFileNotFoundError("missing.dat")
        trigger = PipelineTrigger(factory, logger=logger)

        assert trigger.start("missing.dat")
        assert trigger.wait(timeout=5)

        assert isinstance(trigger.last_error, InputFileNotFoundError)
        assert trigger.last_summary is None
        assert not trigger.is_running
        logger.error.assert_called_once()

    def test_wait_without_run(self, logger):
        assert PipelineTrigger(MagicMock(), logger=logger).wait(timeout=0.1)
