"""
Field validators for client lines.

Provides validators for required fields, length caps, integer coercion,
numeric ranges, MM/DD/YYYY dates and boolean flags.
"""

from .base_validator import BaseValidator, ValidationError
from .boolean_validator import BooleanLiteralValidator
from .date_format_validator import DateFormatValidator
from .integer_validator import IntegerValidator
from .max_length_validator import MaxLengthValidator
from .range_validator import RangeValidator
from .required_field_validator import RequiredFieldValidator

__all__ = [
    "BaseValidator",
    "ValidationError",
    "RequiredFieldValidator",
    "MaxLengthValidator",
    "IntegerValidator",
    "RangeValidator",
    "DateFormatValidator",
    "BooleanLiteralValidator",
]
