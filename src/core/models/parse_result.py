"""
Two-variant outcome of parsing one raw input line (ephemeral).

Callers branch on ``result.ok`` instead of checking for None.
"""

from typing import Literal, Union

from pydantic import BaseModel, Field

from .client_record import ClientRecord


class ParsedLine(BaseModel):
    """A line that produced a valid ClientRecord."""

    ok: Literal[True] = True
    line_number: int = Field(..., ge=1)
    record: ClientRecord

    class Config:
        frozen = True


class RejectedLine(BaseModel):
    """
    A line that failed validation.

    Attributes:
        line_number: 1-based physical line number in the input file
        raw_line: The line as read (without trailing newline)
        field_name: Field whose check failed ("line" for layout errors)
        rule_name: Validator rule that failed
        reason: Human readable failure message
    """

    ok: Literal[False] = False
    line_number: int = Field(..., ge=1)
    raw_line: str
    field_name: str
    rule_name: str
    reason: str

    class Config:
        frozen = True


ParseResult = Union[ParsedLine, RejectedLine]
