"""
Batch status store contract.
"""

from typing import Any, Protocol, runtime_checkable

from catalog_ingest.core.models import Batch, ChunkResult


@runtime_checkable
class BatchStore(Protocol):
    """Persistence of Batch status records."""

    def save(self, batch: Batch) -> Batch:
        """Insert (or overwrite) a batch and return the stored record."""
        ...

    def get_by_id(self, batch_id: str) -> Batch | None:
        ...

    def update(self, batch_id: str, **fields: Any) -> Batch:
        """
        Apply a partial update and return the stored record.

        Raises NotFoundError for unknown ids. updated_at is refreshed
        unless given explicitly.
        """
        ...

    def record_chunk_result(self, result: ChunkResult) -> tuple[Batch, bool]:
        """
        Atomically fold one chunk's counts and errors into its batch.

        A chunk is counted at most once per batch; repeated results for the
        same chunk index, and any result for a batch already in a terminal
        state, leave the batch untouched.

        Returns:
            The stored batch and whether this call recorded the result
        """
        ...
