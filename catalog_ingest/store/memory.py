"""
In-memory batch status store.
"""

import threading
from typing import Any

from catalog_ingest.core.errors import NotFoundError
from catalog_ingest.core.models import Batch, ChunkResult, utc_now


class InMemoryBatchStore:
    """Lock-guarded dict of batches. Returned records are copies."""

    def __init__(self):
        self._batches: dict[str, Batch] = {}
        self._recorded_chunks: set[tuple[str, int]] = set()
        self._lock = threading.Lock()

    def save(self, batch: Batch) -> Batch:
        with self._lock:
            self._batches[batch.id] = batch.model_copy(deep=True)
            return batch.model_copy(deep=True)

    def get_by_id(self, batch_id: str) -> Batch | None:
        with self._lock:
            batch = self._batches.get(batch_id)
            return batch.model_copy(deep=True) if batch else None

    def update(self, batch_id: str, **fields: Any) -> Batch:
        with self._lock:
            return self._update(batch_id, fields).model_copy(deep=True)

    def record_chunk_result(self, result: ChunkResult) -> tuple[Batch, bool]:
        key = (result.batch_id, result.chunk_index)
        with self._lock:
            current = self._get(result.batch_id)
            # Terminal batches are final
            if key in self._recorded_chunks or current.status.is_terminal:
                return current.model_copy(deep=True), False

            updated = self._update(result.batch_id, {
                "processed_items": current.processed_items + result.processed_items,
                "failed_items": current.failed_items + result.failed_items,
                "errors": [*current.errors, *result.errors],
            })
            self._recorded_chunks.add(key)
            return updated.model_copy(deep=True), True

    def _get(self, batch_id: str) -> Batch:
        current = self._batches.get(batch_id)
        if current is None:
            raise NotFoundError("Batch", batch_id)
        return current

    def _update(self, batch_id: str, fields: dict[str, Any]) -> Batch:
        current = self._get(batch_id)
        fields.setdefault("updated_at", utc_now())
        updated = Batch.model_validate({**current.model_dump(), **fields})
        self._batches[batch_id] = updated
        return updated

    def __len__(self) -> int:
        return len(self._batches)
