"""
RequiredFieldValidator - ensures a field is present and not empty.
"""

from typing import Any, Dict
from .base_validator import BaseValidator


class RequiredFieldValidator(BaseValidator):
    """
    Validates that a required field is present and not null/empty.

    Fails if:
    - Field value is None
    - Field value is an empty or whitespace-only string
    """

    def __init__(self, field_name: str, parameters: Dict[str, Any] | None = None):
        super().__init__(field_name, parameters)
        self.message = self.parameters.get("message", "Field value must not be empty")

    def validate(self, value: Any) -> Any:
        """
        Validate that the field is present and not empty.

        Args:
            value: The field value to validate

        Returns:
            The value unchanged

        Raises:
            ValidationError: If field is None or empty string
        """
        if value is None:
            raise self.fail("Field value is missing")

        if isinstance(value, str) and value.strip() == "":
            raise self.fail(self.message)

        return value

    @property
    def rule_type(self) -> str:
        return "required_field"
