"""
Row model representing one validated line of tabular product input.
"""

from pydantic import BaseModel, Field, field_validator


class Row(BaseModel):
    """
    A validated input row (ephemeral, consumed once by the transformer).

    Attributes:
        family_key: Federated id of the family this row belongs to
        option_key: Federated id of the option, absent for family rows
        title: Display title, becomes the item name
        details: Free text, becomes the item description
    """

    family_key: str = Field(..., min_length=1)
    option_key: str | None = None
    title: str = Field(..., min_length=1)
    details: str = Field(..., min_length=1)

    @field_validator("family_key", "title", "details", mode="before")
    @classmethod
    def strip_required(cls, v):
        """Trim surrounding whitespace before the length check."""
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("option_key", mode="before")
    @classmethod
    def blank_option_is_absent(cls, v):
        """Treat a blank option key as absent."""
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    @property
    def is_option(self) -> bool:
        return self.option_key is not None

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "family_key": "fam1",
                "option_key": "opt1",
                "title": "Title B",
                "details": "Details B",
            }
        }
