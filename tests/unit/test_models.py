"""
Unit tests for Pydantic data models.

Tests models for validation, immutability, and constraint enforcement.
"""

import pytest
from datetime import date
from pydantic import ValidationError

from src.core.models import (
    BatchOutcome,
    ClientRecord,
    CommitResult,
    DedupResult,
    ParsedLine,
    PipelineState,
    RejectedLine,
    RunSummary,
)


class TestClientRecord:
    """Tests for ClientRecord model"""

    def test_valid_client_record(self, make_record):
        record = make_record(dni=12345678)
        assert record.dni == 12345678
        assert record.full_name == "Juan Perez"
        assert record.ingress_at == date(2023, 11, 15)
        assert record.is_obligate_subject is None

    def test_guid_generated_when_absent(self):
        first = ClientRecord(
            full_name="Ana Diaz", dni=1, status="A", ingress_at=date(2020, 1, 1), is_pep=False
        )
        second = ClientRecord(
            full_name="Ana Diaz", dni=2, status="A", ingress_at=date(2020, 1, 1), is_pep=False
        )
        assert first.guid
        assert first.guid != second.guid

    @pytest.mark.parametrize("guid", ["guid-1", "", "12345678"])
    def test_guid_must_be_uuid(self, make_record, guid):
        with pytest.raises(ValidationError, match="guid must be a UUID"):
            make_record(guid=guid)

    def test_guid_is_normalized(self, make_record):
        record = make_record(guid="8A0F3C1E-2B9D-4C55-9A61-0D3F0F6E2B11")
        assert record.guid == "8a0f3c1e-2b9d-4c55-9a61-0d3f0f6e2b11"

    def test_record_is_immutable(self, make_record):
        record = make_record()
        with pytest.raises(ValidationError):
            record.status = "INACTIVO"

    @pytest.mark.parametrize("dni", [0, -1])
    def test_non_positive_dni_rejected(self, make_record, dni):
        with pytest.raises(ValidationError) as exc_info:
            make_record(dni=dni)
        assert "dni" in str(exc_info.value)

    def test_status_too_long_rejected(self, make_record):
        with pytest.raises(ValidationError) as exc_info:
            make_record(status="X" * 11)
        assert "status" in str(exc_info.value)

    def test_full_name_limits(self, make_record):
        assert make_record(full_name="N" * 100).full_name == "N" * 100
        with pytest.raises(ValidationError):
            make_record(full_name="N" * 101)
        with pytest.raises(ValidationError):
            make_record(full_name="   ")


class TestParseResults:
    """Tests for ParsedLine / RejectedLine"""

    def test_parsed_line_is_ok(self, make_record):
        result = ParsedLine(line_number=1, record=make_record())
        assert result.ok is True

    def test_rejected_line_is_not_ok(self):
        result = RejectedLine(
            line_number=3,
            raw_line="a|b",
            field_name="line",
            rule_name="field_count",
            reason="Expected 7 fields",
        )
        assert result.ok is False
        assert result.line_number == 3

    def test_line_number_must_be_positive(self):
        with pytest.raises(ValidationError):
            RejectedLine(line_number=0, raw_line="", field_name="line", rule_name="x", reason="x")


class TestBatchOutcome:
    """Tests for DedupResult / CommitResult / BatchOutcome"""

    def test_duplicate_count_sums_both_passes(self):
        result = DedupResult(internal_duplicate_count=2, storage_duplicate_count=3)
        assert result.duplicate_count == 5

    def test_duplicate_keys_cannot_exceed_failures(self):
        with pytest.raises(ValidationError):
            CommitResult(failed_count=1, duplicate_key_count=2)

    def test_outcome_folds_counts(self, make_record):
        outcome = BatchOutcome(
            batch_size=6,
            dedup=DedupResult(
                keep=[make_record(1), make_record(2), make_record(3)],
                internal_duplicate_count=2,
                storage_duplicate_count=1,
            ),
            commit=CommitResult(persisted_count=2, failed_count=1, duplicate_key_count=1, used_fallback=True),
        )
        assert outcome.processed == 2
        assert outcome.errors == 4


class TestRunSummary:
    """Tests for RunSummary model"""

    def test_defaults(self):
        summary = RunSummary(input_file="clients.dat")
        assert summary.total_lines == 0
        assert summary.state == PipelineState.DONE

    def test_negative_counts_rejected(self):
        with pytest.raises(ValidationError):
            RunSummary(input_file="clients.dat", error_records=-1)
