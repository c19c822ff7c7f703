"""
Unit tests for batch accumulation and deduplication.
"""

from unittest.mock import MagicMock

import pytest

from src.ingest.accumulator import BatchAccumulator
from src.ingest.deduplicator import Deduplicator
from src.warehouse.repository import InMemoryClientRepository


class TestBatchAccumulator:
    """Tests for BatchAccumulator"""

    def test_fills_at_threshold(self, make_record):
        accumulator = BatchAccumulator(batch_size=3)
        for dni in (1, 2):
            accumulator.add(make_record(dni))
            assert not accumulator.is_full()

        accumulator.add(make_record(3))
        assert accumulator.is_full()
        assert len(accumulator) == 3

    def test_drain_preserves_order_and_resets(self, make_record):
        accumulator = BatchAccumulator(batch_size=10)
        for dni in (5, 3, 5, 1):
            accumulator.add(make_record(dni))

        drained = accumulator.drain()

        assert [r.dni for r in drained] == [5, 3, 5, 1]
        assert len(accumulator) == 0
        assert not accumulator
        assert accumulator.drain() == []

    @pytest.mark.parametrize("size", [0, -1])
    def test_rejects_non_positive_size(self, size):
        with pytest.raises(ValueError):
            BatchAccumulator(batch_size=size)


class TestDeduplicator:
    """Tests for Deduplicator"""

    def test_first_occurrence_wins(self, make_record, memory_repository, logger):
        first = make_record(12345678, full_name="Juan Perez")
        second = make_record(12345678, full_name="Maria Lopez")

        result = Deduplicator(memory_repository, logger).dedupe([first, second], "final batch")

        assert result.keep == [first]
        assert result.internal_duplicate_count == 1
        assert result.storage_duplicate_count == 0
        assert logger.warning.call_count == 1
        assert "12345678" in logger.warning.call_args.args[0]

    def test_one_warning_per_internal_duplicate(self, make_record, memory_repository, logger):
        batch = [make_record(1), make_record(1), make_record(2), make_record(1), make_record(2)]

        result = Deduplicator(memory_repository, logger).dedupe(batch)

        assert [r.dni for r in result.keep] == [1, 2]
        assert result.internal_duplicate_count == 3
        assert logger.warning.call_count == 3

    def test_storage_lookup_runs_without_internal_duplicates(self, make_record, logger):
        repository = MagicMock()
        repository.find_existing_dnis.return_value = [2]
        batch = [make_record(1), make_record(2), make_record(3)]

        result = Deduplicator(repository, logger).dedupe(batch)

        repository.find_existing_dnis.assert_called_once_with([1, 2, 3])
        assert [r.dni for r in result.keep] == [1, 3]
        assert result.storage_duplicate_count == 1
        assert result.internal_duplicate_count == 0

    def test_storage_duplicates_logged_once_in_aggregate(self, make_record, logger):
        repository = InMemoryClientRepository(existing_dnis=[1, 2, 3])
        batch = [make_record(1), make_record(2), make_record(3), make_record(4)]

        result = Deduplicator(repository, logger).dedupe(batch)

        assert [r.dni for r in result.keep] == [4]
        assert result.storage_duplicate_count == 3
        assert logger.warning.call_count == 1
        assert "3 records" in logger.warning.call_args.args[0]

    def test_storage_lookup_only_sees_pass_one_survivors(self, make_record, logger):
        repository = MagicMock()
        repository.find_existing_dnis.return_value = [7]
        batch = [make_record(7), make_record(7), make_record(8)]

        result = Deduplicator(repository, logger).dedupe(batch)

        repository.find_existing_dnis.assert_called_once_with([7, 8])
        assert [r.dni for r in result.keep] == [8]
        assert result.internal_duplicate_count == 1
        assert result.storage_duplicate_count == 1
        assert result.duplicate_count == 2

    def test_empty_batch_skips_storage(self, logger):
        repository = MagicMock()

        result = Deduplicator(repository, logger).dedupe([])

        repository.find_existing_dnis.assert_not_called()
        assert result.keep == []
        assert result.duplicate_count == 0

    def test_lookup_failure_propagates(self, make_record, logger):
        repository = MagicMock()
        repository.find_existing_dnis.side_effect = ConnectionError("database down")

        with pytest.raises(ConnectionError):
            Deduplicator(repository, logger).dedupe([make_record(1)])
