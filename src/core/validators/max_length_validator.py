"""
MaxLengthValidator - caps the length of string fields.
"""

from typing import Any

from .base_validator import BaseValidator


class MaxLengthValidator(BaseValidator):
    """
    Validates that a string value does not exceed a maximum length.

    Parameters:
    - max_length: Maximum number of characters (inclusive)
    """

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)

        self.max_length = self.parameters.get("max_length")
        if not isinstance(self.max_length, int) or self.max_length < 1:
            raise ValueError("MaxLengthValidator requires a positive 'max_length' parameter")

    def validate(self, value: Any) -> Any:
        if value is None:
            return value

        if len(str(value)) > self.max_length:
            raise self.fail(f"Value must not exceed {self.max_length} characters")

        return value

    @property
    def rule_type(self) -> str:
        return "max_length"
