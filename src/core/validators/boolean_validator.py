"""
BooleanLiteralValidator - reads boolean flags from text.
"""

from typing import Any

from .base_validator import BaseValidator


class BooleanLiteralValidator(BaseValidator):
    """
    Converts a boolean-like string into a bool.

    Only the case-insensitive literal "true" maps to True; any other
    non-empty value maps to False.

    Parameters:
    - optional: Blank values map to None instead of failing (default: False)
    - true_literal: Literal that means True (default: "true")
    """

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)
        self.optional = self.parameters.get("optional", False)
        self.true_literal = self.parameters.get("true_literal", "true").lower()

    def validate(self, value: Any) -> Any:
        if isinstance(value, bool):
            return value

        if value is None or str(value).strip() == "":
            if self.optional:
                return None
            raise self.fail("Boolean flag must not be empty")

        return str(value).strip().lower() == self.true_literal

    @property
    def rule_type(self) -> str:
        return "boolean"
