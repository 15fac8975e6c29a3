"""
Item models exchanged with the external catalog.
"""

from enum import Enum

from pydantic import BaseModel, Field


class ItemRole(str, Enum):
    """Role an item plays in the catalog hierarchy."""

    FAMILY = "family"
    OPTION = "option"


class ItemUpsertRequest(BaseModel):
    """
    Request to create or update one catalog item.

    Created by the transformer and the family resolver, never mutated
    afterwards. The update path wraps it in an ItemUpdateRequest.

    Attributes:
        name: Item name (row title)
        description: Item description (row details)
        federated_id: External identifier the item is keyed by
        roles: Exactly one role at creation time
    """

    name: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    federated_id: str = Field(..., min_length=1)
    roles: frozenset[ItemRole] = Field(..., min_length=1, max_length=1)

    def has_role(self, role: ItemRole) -> bool:
        return role in self.roles

    def to_payload(self) -> dict:
        """Wire representation used by the catalog HTTP API."""
        return {
            "name": self.name,
            "description": self.description,
            "federatedId": self.federated_id,
            "roles": sorted(role.value for role in self.roles),
        }

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "name": "Family fam2",
                "description": "Auto-generated family for fam2",
                "federated_id": "fam2",
                "roles": ["family"],
            }
        }


class ItemUpdateRequest(ItemUpsertRequest):
    """An upsert request paired with the catalog's internal id."""

    internal_id: str = Field(..., min_length=1)

    @classmethod
    def from_request(cls, item: ItemUpsertRequest, internal_id: str) -> "ItemUpdateRequest":
        return cls(**item.model_dump(), internal_id=internal_id)

    def to_payload(self) -> dict:
        payload = super().to_payload()
        payload["id"] = self.internal_id
        return payload


class ExistingItemRef(BaseModel):
    """Result of an existence lookup (transient, not persisted)."""

    federated_id: str
    internal_id: str

    class Config:
        frozen = True
