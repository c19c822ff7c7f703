"""
Parser for pipe-delimited client lines.

Line layout (7 fields):

    name|last_name|dni|status|ingress_at(MM/DD/YYYY)|is_pep|is_obligate_subject

Fields are validated in a fixed order and parsing stops at the first
failing check. A bad line never raises: it comes back as a RejectedLine and
produces exactly one warning log.
"""

import logging
from typing import Callable

from pydantic import ValidationError as ModelValidationError

from src.core.models import ClientRecord, ParsedLine, ParseResult, RejectedLine, new_guid
from src.core.validators import (
    BaseValidator,
    BooleanLiteralValidator,
    DateFormatValidator,
    IntegerValidator,
    MaxLengthValidator,
    RangeValidator,
    RequiredFieldValidator,
    ValidationError,
)
from src.observability.logger import get_logger


FIELD_NAMES = (
    "name",
    "last_name",
    "dni",
    "status",
    "ingress_at",
    "is_pep",
    "is_obligate_subject",
)

DEFAULT_DELIMITER = "|"
NAME_MAX_LENGTH = 50
STATUS_MAX_LENGTH = 10


def build_field_rules() -> list[tuple[str, list[BaseValidator]]]:
    """
    Build the ordered validator chains, one per field.

    Returns:
        List of (field_name, validators) in evaluation order
    """
    return [
        ("name", [
            RequiredFieldValidator("name", {"message": "The name cannot be empty"}),
            MaxLengthValidator("name", {"max_length": NAME_MAX_LENGTH}),
        ]),
        ("last_name", [
            RequiredFieldValidator("last_name", {"message": "The last name cannot be empty"}),
            MaxLengthValidator("last_name", {"max_length": NAME_MAX_LENGTH}),
        ]),
        ("dni", [
            IntegerValidator("dni"),
            RangeValidator("dni", {"min_exclusive": 0}),
        ]),
        ("status", [
            RequiredFieldValidator("status", {"message": "The status cannot be empty"}),
            MaxLengthValidator("status", {"max_length": STATUS_MAX_LENGTH}),
        ]),
        ("ingress_at", [
            DateFormatValidator("ingress_at"),
        ]),
        ("is_pep", [
            BooleanLiteralValidator("is_pep"),
        ]),
        ("is_obligate_subject", [
            BooleanLiteralValidator("is_obligate_subject", {"optional": True}),
        ]),
    ]


class ClientLineParser:
    """
    Turns one raw line into a ClientRecord or a RejectedLine.

    The parser holds no per-run state and can be reused across runs.
    """

    def __init__(
        self,
        delimiter: str = DEFAULT_DELIMITER,
        id_factory: Callable[[], str] = new_guid,
        logger: logging.Logger | None = None,
    ):
        """
        Initialize the parser.

        Args:
            delimiter: Field separator
            id_factory: Generates the guid of each new record
            logger: Logger for rejection warnings
        """
        if not delimiter:
            raise ValueError("delimiter must not be empty")

        self.delimiter = delimiter
        self.id_factory = id_factory
        self.logger = logger or get_logger(__name__)
        self.field_rules = build_field_rules()

    def parse(self, line: str, line_number: int) -> ParseResult:
        """
        Parse one line.

        Args:
            line: Raw line, trailing newline allowed
            line_number: 1-based line number used in the log message

        Returns:
            ParsedLine on success, RejectedLine on the first failing check
        """
        raw_line = line.rstrip("\r\n")
        try:
            record = self._build_record(raw_line)
        except ValidationError as e:
            return self._reject(raw_line, line_number, e.field_name, e.rule_name, e.message)

        return ParsedLine(line_number=line_number, record=record)

    def _build_record(self, raw_line: str) -> ClientRecord:
        parts = raw_line.split(self.delimiter)
        if len(parts) != len(FIELD_NAMES):
            raise ValidationError(
                rule_name="field_count",
                field_name="line",
                message=f"Incorrect line format. Expected {len(FIELD_NAMES)} fields, got {len(parts)}",
            )

        values = {name: part.strip() for name, part in zip(FIELD_NAMES, parts)}

        for field_name, validators in self.field_rules:
            for validator in validators:
                values[field_name] = validator.validate(values[field_name])

        try:
            return ClientRecord(
                guid=self.id_factory(),
                full_name=f"{values['name']} {values['last_name']}",
                dni=values["dni"],
                status=values["status"],
                ingress_at=values["ingress_at"],
                is_pep=values["is_pep"],
                is_obligate_subject=values["is_obligate_subject"],
            )
        except ModelValidationError as e:
            first = e.errors()[0]
            field = str(first["loc"][0]) if first.get("loc") else "record"
            raise ValidationError(rule_name="model", field_name=field, message=first["msg"]) from e

    def _reject(
        self,
        raw_line: str,
        line_number: int,
        field_name: str,
        rule_name: str,
        reason: str,
    ) -> RejectedLine:
        self.logger.warning(
            f"Error parsing line {line_number}: {raw_line}. Reason: {reason}",
            extra={
                "line_number": line_number,
                "raw_line": raw_line,
                "field_name": field_name,
                "rule_name": rule_name,
                "reason": reason,
            },
        )
        return RejectedLine(
            line_number=line_number,
            raw_line=raw_line,
            field_name=field_name,
            rule_name=rule_name,
            reason=reason,
        )
