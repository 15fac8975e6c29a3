"""
RequiredFieldValidator - ensures a field is present and not blank.
"""

from typing import Any

from .base_validator import BaseValidator, ValidationError


class RequiredFieldValidator(BaseValidator):
    """
    Validates that a required field is present and not null/blank.

    Fails if:
    - Field is missing from the row
    - Field value is None
    - Field value is blank after trimming
    """

    def validate(self, value: Any, record: dict[str, Any]) -> None:
        if self.field_name not in record:
            raise ValidationError(
                rule_name=self.rule_type,
                field_name=self.field_name,
                message="Field is missing from record",
            )

        if value is None:
            raise ValidationError(
                rule_name=self.rule_type,
                field_name=self.field_name,
                message="Field value is null",
            )

        if isinstance(value, str) and value.strip() == "":
            raise ValidationError(
                rule_name=self.rule_type,
                field_name=self.field_name,
                message="Field value is empty string",
            )

    @property
    def rule_type(self) -> str:
        return "required_field"
