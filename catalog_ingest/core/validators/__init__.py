"""
Field validators used by the row reader.
"""

from .base_validator import BaseValidator, ValidationError
from .required_field_validator import RequiredFieldValidator

__all__ = [
    "BaseValidator",
    "ValidationError",
    "RequiredFieldValidator",
]
