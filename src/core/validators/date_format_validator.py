"""
DateFormatValidator - parses MM/DD/YYYY dates into UTC calendar dates.
"""

from datetime import date, timedelta
from typing import Any

from .base_validator import BaseValidator, ValidationError
from .range_validator import RangeValidator


DATE_PARTS = ("month", "day", "year")


class DateFormatValidator(BaseValidator):
    """
    Validates a MM/DD/YYYY date and converts it to a date.

    The value must have exactly three numeric parts. Parts are checked
    month first, then day, then year, each against a fixed range. The day
    range does not depend on the month: a day past the end of the month
    rolls over into the next one, so 02/30/2020 becomes 2020-03-01.

    Parameters:
    - min_year: Earliest accepted year (default: 1900)
    - max_year: Latest accepted year (default: 2100)
    """

    FORMAT_HINT = "MM/DD/YYYY"

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)

        self.part_ranges = {
            "month": RangeValidator("month", {"min": 1, "max": 12}),
            "day": RangeValidator("day", {"min": 1, "max": 31}),
            "year": RangeValidator("year", {
                "min": self.parameters.get("min_year", 1900),
                "max": self.parameters.get("max_year", 2100),
            }),
        }

    def validate(self, value: Any) -> Any:
        """
        Validate and convert the value.

        Args:
            value: Raw date text

        Returns:
            datetime.date (UTC calendar day)

        Raises:
            ValidationError: On wrong shape or an out of range part
        """
        if value is None:
            return value

        if isinstance(value, date):
            return value

        parts = str(value).split("/")
        if len(parts) != 3:
            raise self.fail(f"Invalid date format: \"{value}\". Expected {self.FORMAT_HINT}")

        numbers = {}
        for name, part in zip(DATE_PARTS, parts):
            part = part.strip()
            if not part.isdecimal():
                raise self.fail(f"Invalid date: \"{value}\". The {name} must be numeric")
            numbers[name] = int(part)

        for name in DATE_PARTS:
            try:
                self.part_ranges[name].validate(numbers[name])
            except ValidationError as e:
                raise self.fail(f"Invalid {name} in date \"{value}\": {e.message}") from e

        # Day overflow carries into the following month
        return date(numbers["year"], numbers["month"], 1) + timedelta(days=numbers["day"] - 1)

    @property
    def rule_type(self) -> str:
        return "date_format"
