"""
IntegerValidator - coerces a text field into an integer.
"""

import re
from typing import Any

from .base_validator import BaseValidator


class IntegerValidator(BaseValidator):
    """
    Reads the leading integer of a string.

    "123abc" becomes 123, "  42" becomes 42, and "abc" is rejected.
    """

    LEADING_INT = re.compile(r"^\s*([+-]?\d+)")

    def validate(self, value: Any) -> Any:
        """
        Validate and convert the value.

        Args:
            value: The field value to convert

        Returns:
            The parsed integer

        Raises:
            ValidationError: If no integer can be read from the value
        """
        if value is None:
            return value

        # Already an int (bool is excluded on purpose)
        if isinstance(value, int) and not isinstance(value, bool):
            return value

        match = self.LEADING_INT.match(str(value))
        if not match:
            raise self.fail(f"Invalid integer value: \"{value}\"")

        return int(match.group(1))

    @property
    def rule_type(self) -> str:
        return "type_check"
