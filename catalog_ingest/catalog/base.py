"""
Catalog client contract.
"""

from collections.abc import Iterable, Sequence
from typing import Protocol, runtime_checkable

from catalog_ingest.core.errors import PreconditionError
from catalog_ingest.core.models import ExistingItemRef, ItemUpdateRequest, ItemUpsertRequest

DEFAULT_MAX_BATCH_SIZE = 100


@runtime_checkable
class CatalogClient(Protocol):
    """
    Capability interface for the external catalog service.

    Implementations raise ReconciliationError (or a subclass) on lookup,
    create or update failures, and PreconditionError when a call carries
    more than max_batch_size items.
    """

    max_batch_size: int

    def lookup_by_federated_ids(self, federated_ids: Iterable[str]) -> list[ExistingItemRef]:
        """Return a reference for every id that already exists."""
        ...

    def create_batch(self, items: Sequence[ItemUpsertRequest]) -> list[str]:
        """Create items, returning their internal ids."""
        ...

    def update_batch(self, items: Sequence[ItemUpdateRequest]) -> list[str]:
        """Update existing items, returning their internal ids."""
        ...


def check_batch_size(items: Sequence, max_batch_size: int) -> None:
    """Raise PreconditionError when a call exceeds the catalog batch limit."""
    if len(items) > max_batch_size:
        raise PreconditionError(
            f"Batch size {len(items)} exceeds maximum of {max_batch_size}",
            details={"size": len(items), "limit": max_batch_size},
        )
